import pytest

from config.config import PaymentSettings, Settings

from .fakes import PAY_TO, FakeFacilitator, FakeUpstreamClient, build_client


@pytest.fixture()
def free_settings():
    return Settings()


@pytest.fixture()
def paid_settings():
    return Settings(payment=PaymentSettings(enabled=True, pay_to=PAY_TO, network="base"))


@pytest.fixture()
def upstream():
    return FakeUpstreamClient()


@pytest.fixture()
def facilitator():
    return FakeFacilitator()


@pytest.fixture()
def client(free_settings, upstream):
    return build_client(free_settings, upstream)


@pytest.fixture()
def paid_client(paid_settings, upstream, facilitator):
    return build_client(paid_settings, upstream, facilitator)
