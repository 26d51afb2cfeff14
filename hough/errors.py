class HoughError(Exception):
    def __init__(self, msg: str, title: str = ""):
        super().__init__(msg)
        self.msg = msg
        self.title = title


class PreconditionError(HoughError):
    """Raised when the engine is asked to work on a meaningless parameter space."""


class ParameterMismatchError(PreconditionError):
    """Raised when a shape expects a different number of parameters than registered."""


class ImageLoadError(HoughError):
    pass
