import pytest
from structlog.testing import capture_logs

from caching_presenter import (
    CachingPresenter,
    PresenterNotFound,
    make_proxy,
    present,
    present_collection,
    presents,
)
from caching_presenter.presents import _registry, find_presenter, registered_presenters


class Account:
    def __init__(self, owner, balance=0):
        self.owner = owner
        self.balance = balance
        self.statements = 0

    def statement(self, month):
        self.statements += 1
        return f"{self.owner}:{month}:{self.balance}"


class SavingsAccount(Account):
    pass


class Unregistered:
    name = "plain"


@presents("account", accepts=["viewer"], requires=["currency"])
class AccountPresenter(CachingPresenter):
    def headline(self):
        return f"{self.owner} ({self.currency}) for {self.viewer}"

    def statement(self, month):
        return self.account.statement(month).upper()


@pytest.fixture
def account():
    return Account("alice", balance=10)


def test_presents_wires_constructor(account):
    presenter = AccountPresenter(account=account, currency="USD")

    assert presenter.account is account
    assert presenter.currency == "USD"
    assert presenter.viewer is None
    assert presenter.headline() == "alice (USD) for None"
    assert presenter.balance == 10


def test_presents_accepts_optional_options(account):
    presenter = AccountPresenter(account=account, currency="EUR", viewer="bob")
    assert presenter.headline() == "alice (EUR) for bob"


def test_presents_validates_options(account):
    with pytest.raises(TypeError, match="currency"):
        AccountPresenter(account=account)
    with pytest.raises(TypeError, match="account"):
        AccountPresenter(currency="USD")
    with pytest.raises(TypeError, match="colour"):
        AccountPresenter(account=account, currency="USD", colour="red")


def test_presented_options_are_read_only(account):
    presenter = AccountPresenter(account=account, currency="USD")
    with pytest.raises(AttributeError):
        presenter.currency = "EUR"
    assert presenter.currency == "USD"
    assert not hasattr(account, "currency")


def test_presenter_logic_over_presented_object_is_cached(account):
    presenter = AccountPresenter(account=account, currency="USD")

    assert presenter.statement("may") == "ALICE:MAY:10"
    assert presenter.statement("may") == "ALICE:MAY:10"
    assert account.statements == 1


def test_presents_registers_by_class_name():
    assert registered_presenters()["AccountPresenter"] is AccountPresenter
    assert find_presenter(Account("alice")) is AccountPresenter
    # Subclasses fall back to their base class presenter
    assert find_presenter(SavingsAccount("bob")) is AccountPresenter
    assert find_presenter(Unregistered()) is None


@pytest.fixture
def clash_name():
    yield "ClashPresenter"
    _registry.pop("ClashPresenter", None)


def test_presents_rejects_name_clash(clash_name):
    billing = presents("invoice")(
        type(clash_name, (CachingPresenter,), {"__module__": "billing"})
    )

    reports = type(clash_name, (CachingPresenter,), {"__module__": "reports"})
    with pytest.raises(ValueError, match="already registered by billing.ClashPresenter"):
        presents("invoice")(reports)

    assert registered_presenters()[clash_name] is billing


def test_presents_replaces_redefined_presenter(clash_name):
    first = presents("invoice")(
        type(clash_name, (CachingPresenter,), {"__module__": "billing"})
    )
    second = type(clash_name, (CachingPresenter,), {"__module__": "billing"})

    with capture_logs() as logs:
        presents("invoice")(second)

    assert registered_presenters()[clash_name] is second
    assert registered_presenters()[clash_name] is not first
    assert logs[0]["event"] == "presenter_replaced"
    assert logs[0]["module"] == "billing"


def test_presents_rejects_invalid_use():
    with pytest.raises(ValueError):
        presents("_account")
    with pytest.raises(TypeError):
        presents("account")(Account)


def test_present_uses_registered_presenter(account):
    presenter = present(account, currency="USD", viewer="carol")

    assert isinstance(presenter, AccountPresenter)
    assert presenter.headline() == "alice (USD) for carol"


def test_present_with_explicit_presenter_class(account):
    class PlainPresenter(CachingPresenter):
        def label(self):
            return self.owner.title()

    presenter = present(account, PlainPresenter)
    assert isinstance(presenter, PlainPresenter)
    assert presenter.label() == "Alice"


def test_present_falls_back_to_plain_presenter():
    presenter = present(Unregistered())
    assert type(presenter) is CachingPresenter
    assert presenter.name == "plain"

    with pytest.raises(PresenterNotFound):
        present(Unregistered(), strict=True)


def test_present_returns_existing_presenters():
    presenter = make_proxy(Unregistered())
    assert present(presenter) is presenter


def test_present_collection():
    accounts = [Account("alice"), SavingsAccount("bob")]
    presenters = present_collection(accounts, currency="USD")

    assert [type(p) for p in presenters] == [AccountPresenter, AccountPresenter]
    assert [p.owner for p in presenters] == ["alice", "bob"]
