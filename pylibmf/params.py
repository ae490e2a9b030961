"""Training configuration: native defaults overlaid with caller options."""
from typing import Dict, Optional

import yaml

from . import native
from .loss import Loss
from .structs import MFParameter

# caller option name -> mf_parameter field
OPTION_FIELDS = {
    'loss': 'fun',
    'factors': 'k',
    'threads': 'nr_threads',
    'bins': 'nr_bins',
    'iterations': 'nr_iters',
    'lambda_p1': 'lambda_p1',
    'lambda_p2': 'lambda_p2',
    'lambda_q1': 'lambda_q1',
    'lambda_q2': 'lambda_q2',
    'learning_rate': 'eta',
    'alpha': 'alpha',
    'c': 'c',
    'nmf': 'do_nmf',
    'quiet': 'quiet',
}

# mf_parameter fields declared as C int
INT_FIELDS = {'fun', 'k', 'nr_threads', 'nr_bins', 'nr_iters'}

# the library warns about too few blocks with its own default of 20
DEFAULT_BINS = 25


def validate_options(options: Dict) -> None:
    """Reject option names the library does not understand"""
    unknown = sorted(set(options) - set(OPTION_FIELDS))
    if unknown:
        available = ', '.join(OPTION_FIELDS)
        raise ValueError(
            f"Unknown option(s): {', '.join(unknown)}. "
            f"Available options: {available}"
        )


def build_param(options: Optional[Dict] = None, lib=None) -> MFParameter:
    """Build a fresh mf_parameter for one training call.

    Args:
        options: Caller options keyed by OPTION_FIELDS names, missing
            keys keep the library defaults
        lib: Loaded library, defaults to native.get_lib()

    Returns:
        The parameter struct to pass by value
    """
    options = options or {}
    lib = lib or native.get_lib()

    param = lib.mf_get_default_param()
    # nodes live in a buffer pinned for the duration of the call
    param.copy_data = False
    param.nr_bins = DEFAULT_BINS

    # loss must be applied before the nmf check below
    for name, field in OPTION_FIELDS.items():
        if name in options:
            _set_field(param, name, field, options[name])

    # generalized KL-divergence only works with non-negative factors
    if param.fun == Loss.REAL_KL:
        param.do_nmf = True

    return param


def _set_field(param: MFParameter, name: str, field: str, value) -> None:
    # integral floats such as 16.0 from YAML are accepted
    if field in INT_FIELDS and isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Option {name} must be an integer, got {value}")
        value = int(value)
    try:
        setattr(param, field, value)
    except TypeError as e:
        raise ValueError(f"Option {name} has invalid value {value!r}") from e


def load_options(config_path: str) -> Dict:
    """Load model options from a YAML file.

    The file holds either a flat mapping of option names or one nested
    under a top-level 'model' section.
    """
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Config in {config_path} must be a mapping")
    if isinstance(config.get('model'), dict):
        config = config['model']
    validate_options(config)
    return config


def param_to_dict(param: MFParameter) -> Dict:
    """Snapshot of a parameter struct, keyed by option name"""
    return {
        name: getattr(param, field)
        for name, field in OPTION_FIELDS.items()
    }
