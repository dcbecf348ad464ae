import pytest

from caching_presenter.eligibility import (
    Verdict,
    attribute_name,
    classify,
    is_mutator,
    mutator_name,
)


@pytest.mark.parametrize("operation, has_callback, expected", [
    ("size", False, Verdict.CACHEABLE),
    ("size", True, Verdict.BYPASS_CALLBACK),
    ("size=", False, Verdict.BYPASS_MUTATOR),
    ("size=", True, Verdict.BYPASS_MUTATOR),
    ("[]=", False, Verdict.BYPASS_MUTATOR),
    ("__getitem__", False, Verdict.CACHEABLE),
    ("", False, Verdict.CACHEABLE),
])
def test_classify(operation, has_callback, expected):
    """Test the verdict for each combination of name and callback."""
    assert classify(operation, has_callback) is expected


def test_mutator_check_is_purely_syntactic():
    """Only a trailing '=' marks a mutator."""
    assert is_mutator("balance=")
    assert not is_mutator("set_balance")
    assert not is_mutator("=balance")
    assert not is_mutator("balance ==x")


def test_mutator_name_round_trip():
    assert mutator_name("owner") == "owner="
    assert attribute_name("owner=") == "owner"
    assert attribute_name("owner") == "owner"


def test_verdict_cacheable_flag():
    assert Verdict.CACHEABLE.cacheable
    assert not Verdict.BYPASS_MUTATOR.cacheable
    assert not Verdict.BYPASS_CALLBACK.cacheable
