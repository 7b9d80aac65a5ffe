"""error taxonomy for the analysis pipelines"""

from typing import Optional


class RampartError(Exception):
    """base class for every error raised on purpose by rampart"""


class InputValidationError(RampartError):
    """malformed or incomplete analysis request (client error)"""


class UpstreamFetchError(RampartError):
    """required source or abi could not be obtained from the explorer"""


class UpstreamParseError(RampartError):
    """an upstream service answered with something we could not parse"""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class EngineFailure(RampartError):
    """one analysis engine failed internally"""

    def __init__(self, engine: str, message: str):
        super().__init__(f"[{engine}] {message}")
        self.engine = engine


class PipelineFailure(RampartError):
    """a stage of the ai-driven fuzzing pipeline could not complete"""

    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class RepositoryCloneError(RampartError):
    """the repository could not be cloned into the scan workspace"""
