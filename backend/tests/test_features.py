"""
Unit Tests — feature framing, normalization, and batch validation.
"""

import numpy as np
import pandas as pd
import pytest


class TestFrame:
    def test_rows_match_records(self, three_item_batch):
        from ml.features import frame

        features, labels = frame(three_item_batch)
        assert features.shape == (3, 3)
        for k, r in enumerate(three_item_batch):
            assert tuple(features[k]) == (r.inventory, r.avg_sales, r.lead_time)
        assert labels.tolist() == [1, 0, 1]

    def test_idempotent(self, rng, settings):
        from ml.features import frame
        from ml.synthesize import generate

        batch = generate(50, rng=rng, settings=settings)
        f1, l1 = frame(batch)
        f2, l2 = frame(batch)
        np.testing.assert_array_equal(f1, f2)
        np.testing.assert_array_equal(l1, l2)

    def test_empty_batch(self):
        from ml.features import frame
        from ml.records import Batch

        features, labels = frame(Batch())
        assert features.shape == (0, 3)
        assert labels.shape == (0,)

    def test_returns_copy_of_feature_cols(self):
        from ml.features import get_feature_cols

        cols = get_feature_cols()
        cols.append("extra")
        assert get_feature_cols() == ["inventory", "avg_sales", "lead_time"]


class TestFitTransform:
    def test_columns_within_unit_range(self, rng, settings):
        from ml.features import fit_transform, frame
        from ml.synthesize import generate

        features, _ = frame(generate(200, rng=rng, settings=settings))
        normalized = fit_transform(features)
        assert normalized.values.min(axis=0).tolist() == [0.0, 0.0, 0.0]
        assert normalized.values.max(axis=0).tolist() == [1.0, 1.0, 1.0]
        assert normalized.degenerate == []

    def test_known_values(self):
        from ml.features import fit_transform

        normalized = fit_transform(np.array([[0.0, 10.0, 1.0], [50.0, 20.0, 3.0], [100.0, 30.0, 2.0]]))
        np.testing.assert_allclose(
            normalized.values,
            [[0.0, 0.0, 0.0], [0.5, 0.5, 1.0], [1.0, 1.0, 0.5]],
        )
        assert normalized.col_min.tolist() == [0.0, 10.0, 1.0]
        assert normalized.col_max.tolist() == [100.0, 30.0, 3.0]

    def test_constant_column_maps_to_zero(self, batch_factory):
        from ml.features import fit_transform, frame

        batch = batch_factory([(10, 35, 7), (80, 14, 7), (6, 7, 7)])
        features, _ = frame(batch)
        normalized = fit_transform(features)
        assert not np.isnan(normalized.values).any()
        assert normalized.values[:, 2].tolist() == [0.0, 0.0, 0.0]
        assert normalized.degenerate_columns == ["lead_time"]
        assert normalized.degenerate[0].value == 7.0

    def test_single_row_is_all_degenerate(self):
        from ml.features import fit_transform

        normalized = fit_transform(np.array([[5.0, 6.0, 7.0]]))
        assert normalized.values.tolist() == [[0.0, 0.0, 0.0]]
        assert len(normalized.degenerate) == 3

    def test_input_not_mutated(self):
        from ml.features import fit_transform

        features = np.array([[1.0, 2.0, 3.0], [3.0, 4.0, 5.0]])
        original = features.copy()
        fit_transform(features)
        np.testing.assert_array_equal(features, original)

    def test_rejects_1d_input(self):
        from ml.features import fit_transform

        with pytest.raises(ValueError):
            fit_transform(np.array([1.0, 2.0, 3.0]))


class TestBatchValidation:
    def test_generated_batch_passes(self, rng, settings):
        from ml.synthesize import generate
        from ml.validate import validate_batch

        df = generate(20, rng=rng, settings=settings).to_frame()
        assert len(validate_batch(df)) == 20

    def test_negative_inventory_fails(self):
        import pandera

        from ml.validate import validate_batch

        df = pd.DataFrame(
            {
                "id": [1, 2],
                "name": ["A", "B"],
                "inventory": [5, -1],
                "avg_sales": [10, 12],
                "lead_time": [3, 4],
                "ground_truth_reorder": [True, False],
            }
        )
        with pytest.raises(pandera.errors.SchemaErrors):
            validate_batch(df)

    def test_duplicate_ids_fail(self):
        import pandera

        from ml.validate import validate_batch

        df = pd.DataFrame(
            {
                "id": [1, 1],
                "name": ["A", "B"],
                "inventory": [5, 6],
                "avg_sales": [10, 12],
                "lead_time": [3, 4],
                "ground_truth_reorder": [True, False],
            }
        )
        with pytest.raises(pandera.errors.SchemaErrors):
            validate_batch(df)

    def test_no_raise_returns_input(self):
        from ml.validate import validate_batch

        df = pd.DataFrame({"id": [0]})
        assert validate_batch(df, raise_on_error=False) is df
