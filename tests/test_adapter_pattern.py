import unittest
from typing import Protocol

import pytest

from ctorwire import Container, OutsideScopeError


class PaymentClient(Protocol):
    def charge(self, order_id: str, amount_cents: int) -> None: ...


class InfoLogger(Protocol):
    def info(self, msg: object, *args: object) -> None: ...


class NullLogger:
    def info(self, msg: object, *args: object) -> None:
        pass


class RecordingLogger:
    def __init__(self) -> None:
        self.lines: list[str] = []

    def info(self, msg: object, *args: object) -> None:
        self.lines.append(str(msg) % args)


class StripeSdk:
    def pay(self, amount_usd: float, reference: str) -> bool:
        return True


class RecordingStripeSdk(StripeSdk):
    def __init__(self) -> None:
        self.payments: list[tuple[float, str]] = []

    def pay(self, amount_usd: float, reference: str) -> bool:
        self.payments.append((amount_usd, reference))
        return True


class StripeAdapter:
    def __init__(self, sdk: StripeSdk, logger: InfoLogger, usd_per_cent: float = 0.01) -> None:
        self._logger = logger
        self._sdk = sdk
        self._usd_per_cent = usd_per_cent

    def charge(self, order_id: str, amount_cents: int) -> None:
        self._logger.info("charging %s through stripe", order_id)
        amount_usd = amount_cents * self._usd_per_cent
        ok = self._sdk.pay(amount_usd, reference=order_id)
        if not ok:
            msg = "Stripe payment failed"
            raise RuntimeError(msg)


class TestInstanceWiredScopedAdapter(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()
        self.sdk = RecordingStripeSdk()
        self.logger = RecordingLogger()
        # InfoLogger is a plain protocol: the instance is accepted structurally.
        self.cont.register_instance(StripeSdk, self.sdk)
        self.cont.register_instance(InfoLogger, self.logger)
        self.cont.bind(PaymentClient).to(StripeAdapter).as_scoped()

    def test_registered_instances_are_injected_into_adapter(self):
        with self.cont.create_scope() as scope:
            client = scope.resolve(PaymentClient)
            client.charge("order-123", 5000)

        assert client._sdk is self.sdk
        assert client._logger is self.logger
        assert client._usd_per_cent == 0.01
        assert self.sdk.payments == [(pytest.approx(50.0), "order-123")]
        assert self.logger.lines == ["charging order-123 through stripe"]

    def test_each_scope_builds_its_own_adapter_over_shared_instances(self):
        with self.cont.create_scope() as first, self.cont.create_scope() as second:
            a = first.resolve(PaymentClient)
            b = second.resolve(PaymentClient)

            assert a is first.resolve(PaymentClient)
            assert a is not b
            assert a._sdk is b._sdk is self.sdk

    def test_adapter_cannot_be_resolved_outside_a_scope(self):
        with pytest.raises(OutsideScopeError):
            self.cont.resolve(PaymentClient)

        # The instances it depends on stay resolvable from the container.
        assert self.cont.resolve(InfoLogger) is self.logger


class TestFactoryWiredAdapter(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()
        self.cont.register(StripeSdk).as_singleton()
        self.cont.bind(InfoLogger).to(NullLogger).as_singleton()
        self.cont.bind(PaymentClient).to(
            StripeAdapter,
            lambda: StripeAdapter(
                self.cont.resolve(StripeSdk),
                self.cont.resolve(InfoLogger),
                usd_per_cent=0.0125,
            ),
        ).as_scoped()

    def test_adapter_is_shared_within_a_scope(self):
        with self.cont.create_scope() as scope:
            client = scope.resolve(PaymentClient)
            client.charge("order-123", 5000)

            assert scope.resolve(PaymentClient) is client
            assert client._usd_per_cent == 0.0125
            assert client._sdk is self.cont.resolve(StripeSdk)
