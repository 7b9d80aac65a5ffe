"""generic invariant fuzzing: the fixed GenericFuzzer suite pointed at an arbitrary address"""

from models.report import FuzzOutcome, FuzzStatus
from verification.foundry_executor import FuzzHarness

PASSED_REASON = "All generic invariants passed."
INCOMPATIBLE_REASON = "Generic test suite was not compatible with this contract."
FAILED_REASON_PREFIX = "Generic invariant violated. Details: "


class GenericFuzzerAdapter:
    ENGINE = "generic_fuzz"

    def __init__(self, harness: FuzzHarness):
        self.harness = harness

    def run(self, address: str) -> FuzzOutcome:
        """raises EngineFailure only when forge cannot be run at all"""
        run = self.harness.run_generic(address, engine=self.ENGINE)
        if run.status == FuzzStatus.PASSED:
            return FuzzOutcome(status=FuzzStatus.PASSED, detail=PASSED_REASON)
        if run.status == FuzzStatus.INCOMPATIBLE:
            return FuzzOutcome(status=FuzzStatus.INCOMPATIBLE, detail=INCOMPATIBLE_REASON)
        return FuzzOutcome(status=FuzzStatus.FAILED, detail=FAILED_REASON_PREFIX + run.log)
