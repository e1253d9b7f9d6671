import concurrent.futures
import threading
import time
import unittest

from ctorwire import Container


class Counted:
    """Records every construction; sleeps to widen the race window."""

    created = []
    lock = threading.Lock()

    def __init__(self):
        time.sleep(0.01)
        with Counted.lock:
            Counted.created.append(self)


class Consumer:
    def __init__(self, counted: Counted):
        self.counted = counted


class TestConcurrentResolution(unittest.TestCase):
    def setUp(self):
        Counted.created = []
        self.cont = Container()

    def _run_concurrently(self, func, workers=16):
        barrier = threading.Barrier(workers)

        def task():
            barrier.wait()
            return func()

        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(task) for _ in range(workers)]
            return [f.result() for f in futures]

    def test_singleton_is_constructed_once_under_contention(self):
        self.cont.register(Counted).as_singleton()

        results = self._run_concurrently(lambda: self.cont.resolve(Counted))

        assert len(Counted.created) == 1
        assert all(r is results[0] for r in results)

    def test_singleton_nested_in_transients_is_shared_under_contention(self):
        self.cont.register(Counted).as_singleton()
        self.cont.register(Consumer).as_transient()

        results = self._run_concurrently(lambda: self.cont.resolve(Consumer))

        assert len({id(r) for r in results}) == len(results)
        assert len({id(r.counted) for r in results}) == 1

    def test_scoped_instance_is_shared_by_threads_using_one_scope(self):
        self.cont.register(Counted).as_scoped()

        with self.cont.create_scope() as scope:
            results = self._run_concurrently(lambda: scope.resolve(Counted))
            cached = scope.get_cached(Counted)

        assert all(r is cached for r in results)

    def test_threads_with_their_own_scopes_get_their_own_instances(self):
        self.cont.register(Counted).as_scoped()

        def in_own_scope():
            with self.cont.create_scope() as scope:
                return scope.resolve(Counted)

        results = self._run_concurrently(in_own_scope)

        assert len({id(r) for r in results}) == len(results)
        assert self.cont.active_scope_ids == frozenset()

    def test_concurrent_binding_and_resolution(self):
        class A: ...

        self.cont.register(A).as_transient()
        errors = []

        def rebind_and_resolve():
            try:
                self.cont.register(A).as_transient()
                return self.cont.resolve(A)
            except Exception as e:  # noqa: BLE001
                errors.append(e)
                return None

        results = self._run_concurrently(rebind_and_resolve)

        assert errors == []
        assert all(isinstance(r, A) for r in results)
