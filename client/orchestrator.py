"""Runs the GET and POST tests either concurrently or one after another."""

import threading
from typing import Callable, Dict, List, Optional, Tuple

from client.config import TestConfig
from client.transfer_client import TransferClient
from common.logging_config import get_logger
from common.types import TestReport, TransferResult

logger = get_logger(__name__)

TestFn = Callable[[], Optional[TransferResult]]


class TestOrchestrator:
    """
    Drives the enabled tests for one client invocation.

    In parallel mode both tests run in their own thread and ``run`` returns
    only after both threads finished. A failing test never cancels the other.
    Otherwise the enabled tests run serially, POST first.
    """
    __test__ = False

    def __init__(self, config: TestConfig, client: Optional[TransferClient] = None):
        self.config = config
        self.client = client or TransferClient(config)

    def _enabled_tests(self) -> List[Tuple[str, TestFn]]:
        tests = []
        if self.config.run_post:
            tests.append(('post', self.client.run_post_test))
        if self.config.run_get:
            tests.append(('get', self.client.run_get_test))
        return tests

    def run(self) -> TestReport:
        """
        Run the enabled tests.

        Returns:
            TestReport with a result for every test that completed
        """
        tests = self._enabled_tests()
        if not tests:
            logger.warning("Both GET and POST tests are disabled, nothing to do")
            return TestReport()

        if self.config.parallel and len(tests) == 2:
            logger.info("Running POST and GET tests in parallel")
            results = self._run_parallel(tests)
        else:
            logger.info(f"Running {' then '.join(name.upper() for name, _ in tests)} serially")
            results = self._run_serial(tests)

        return TestReport(get=results.get('get'), post=results.get('post'))

    def _run_serial(self, tests: List[Tuple[str, TestFn]]) -> Dict[str, Optional[TransferResult]]:
        results: Dict[str, Optional[TransferResult]] = {}
        for name, test in tests:
            self._run_one(name, test, results)
        return results

    def _run_parallel(self, tests: List[Tuple[str, TestFn]]) -> Dict[str, Optional[TransferResult]]:
        results: Dict[str, Optional[TransferResult]] = {}
        threads = [
            threading.Thread(
                target=self._run_one,
                args=(name, test, results),
                name=f"{name}-test",
                daemon=True
            )
            for name, test in tests
        ]

        for t in threads:
            t.start()
        for t in threads:
            t.join()

        return results

    def _run_one(self, name: str, test: TestFn, results: Dict[str, Optional[TransferResult]]) -> None:
        try:
            results[name] = test()
        except Exception as e:
            logger.error(f"{name.upper()} test crashed: {e}", exc_info=True)
            results[name] = None

    def close(self) -> None:
        self.client.close()
