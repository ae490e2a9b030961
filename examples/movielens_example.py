"""
MovieLens Example using the LIBMF bindings

Trains a real-valued factorization on MovieLens 100K ratings, reports
RMSE on a held out split and round-trips the model through a file.

Usage:
    python examples/movielens_example.py \
        --ratings ml-100k/u.data --config examples/config.yaml
"""

import argparse
import logging

import numpy as np
import pandas as pd

from pylibmf import Matrix, Model


def build_matrices(ratings_path: str, test_ratio: float, seed: int):
    """Split MovieLens ratings into train and test Matrix objects."""
    rdf = pd.read_csv(
        ratings_path,
        sep='\t',
        header=None,
        names=['UserID', 'MovieID', 'Rating', 'Timestamp']
    )

    # LIBMF wants zero based contiguous indices
    rows = rdf.UserID.astype('category').cat.codes.values
    columns = rdf.MovieID.astype('category').cat.codes.values
    values = rdf.Rating.values.astype(np.float32)

    rstate = np.random.RandomState(seed=seed)
    test_mask = rstate.rand(len(rdf)) < test_ratio

    train_set, test_set = Matrix(), Matrix()
    train_set.extend(rows[~test_mask], columns[~test_mask],
                     values[~test_mask])
    test_set.extend(rows[test_mask], columns[test_mask], values[test_mask])
    return train_set, test_set


def main():
    parser = argparse.ArgumentParser(
        description='Train MovieLens ratings with LIBMF'
    )
    parser.add_argument(
        '--ratings',
        type=str,
        default='ml-100k/u.data',
        help='MovieLens 100K u.data path'
    )
    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Model options YAML path'
    )
    parser.add_argument(
        '--model-path',
        type=str,
        default='movielens.model',
        help='Where to save the trained model'
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)

    print(f"Loading ratings: {args.ratings}")
    train_set, test_set = build_matrices(args.ratings, 0.2, seed=1234)
    print(f"Train: {train_set}, test: {test_set}")

    model = Model.from_config(args.config)
    print(f"5-fold CV score: {model.cv(train_set, folds=5):.4f}")

    with model:
        model.fit(train_set, test_set)
        print(f"Test RMSE: {model.rmse(test_set):.4f}")
        print(f"Test MAE: {model.mae(test_set):.4f}")
        print(f"Bias: {model.bias():.4f}")
        pred = model.predict(0, 0)
        model.save(args.model_path)

    with Model.load(args.model_path) as loaded:
        assert loaded.predict(0, 0) == pred
        print(f"Reloaded {loaded}, prediction(0, 0) = {pred:.4f}")


if __name__ == '__main__':
    main()
