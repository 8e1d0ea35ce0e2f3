"""
Tests for Stage 2 normalization
"""

import pytest

from amountex.processors.amounts.normalizer import AmountNormalizer, normalize_token


class TestNormalizeToken:
    """Tests for single-token normalization"""

    @pytest.mark.parametrize('token,expected', [
        ('1O0', 100.0),
        ('l2S', 125.0),
        ('1,200', 1200.0),
        ('₹1200', 1200.0),
        ('$12.50', 12.5),
        ('10%', 10.0),
        ('0.00', 0.0),
        ('Rs.450', 450.0),
        ('B0', 80.0),
        ('1200/-', 1200.0),
        ('450.00 INR', 450.0),
        ('1.2.3', 1.2),
        ('.5', 0.5),
    ])
    def test_corrections(self, token, expected):
        assert normalize_token(token) == expected

    @pytest.mark.parametrize('token', ['abc', '', '-5', 'inf', '/-', 'INR'])
    def test_rejected(self, token):
        assert normalize_token(token) is None


class TestAmountNormalizer:
    """Tests for AmountNormalizer.normalize_amounts"""

    def setup_method(self):
        self.normalizer = AmountNormalizer()

    def test_all_accepted(self):
        result = self.normalizer.normalize_amounts(['1200', '1000', '200'])

        assert result.values == [1200.0, 1000.0, 200.0]
        assert result.confidence == pytest.approx(0.9)

    def test_rejected_tokens_dropped_and_scored(self):
        result = self.normalizer.normalize_amounts(['1200', 'xyz'])

        assert result.values == [1200.0]
        assert result.confidence == pytest.approx((0.9 + 0.3) / 2)

    def test_all_rejected(self):
        result = self.normalizer.normalize_amounts(['xyz', 'abc'])

        assert result.values == []
        assert result.confidence == pytest.approx(0.3)

    def test_empty(self):
        result = self.normalizer.normalize_amounts([])
        assert result.values == []
        assert result.confidence == 0.0

    def test_never_grows(self):
        tokens = ['12', 'x', '1O', '??', '7%']
        result = self.normalizer.normalize_amounts(tokens)
        assert len(result.values) <= len(tokens)

    def test_same_tokens_same_result(self):
        tokens = ['1O0', '1,250.50', 'xyz', '1200/-', '18%']

        assert self.normalizer.normalize_amounts(tokens) == self.normalizer.normalize_amounts(tokens)

    def test_trailing_text_does_not_lower_confidence(self):
        result = self.normalizer.normalize_amounts(['1200/-', '450.00 INR'])

        assert result.values == [1200.0, 450.0]
        assert result.confidence == pytest.approx(0.9)

    def test_idempotent_on_own_output(self):
        first = self.normalizer.normalize_amounts(['1O0', '1,250.50', '₹75', '18%'])
        second = self.normalizer.normalize_amounts([str(v) for v in first.values])

        assert second.values == first.values

    def test_wire_names(self):
        data = self.normalizer.normalize_amounts(['5']).to_dict()
        assert data == {'normalized_amounts': [5.0], 'normalization_confidence': 0.9}
