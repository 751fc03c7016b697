"""
Call shapes for stack trace tests.  Tests locate lines by the marker comments, keep
them on the lines they label.
"""


class TraceFixture:
    def outer(self, value, label="outer"):
        try:
            self.inner(value, [1, 2, 3])  # outer-call
        except ValueError as e:
            raise RuntimeError("from outer") from e  # outer-raise

    def inner(self, value, items):
        raise ValueError(f"from inner: {value}")  # inner-raise

    def implicit(self, value):
        try:
            self.inner(value, [])
        except ValueError:
            raise KeyError("during handling")  # implicit-raise

    def suppressed(self, value):
        try:
            self.inner(value, [])
        except ValueError:
            raise KeyError("suppressed") from None

    def closure(self, token):
        fail = lambda reason: self.inner(reason, [])  # noqa: E731
        fail(token)  # closure-call

    @staticmethod
    def static_fail(code):
        raise KeyError(code)  # static-raise

    @classmethod
    def class_fail(cls, reason):
        raise LookupError(reason)  # class-raise


def variadic_fail(first, *rest, **options):
    raise TypeError("variadic")  # variadic-raise


def nested_fail(value):
    def helper(amount):
        raise ArithmeticError(amount)  # nested-raise

    helper(value * 2)


def marker_line(marker: str) -> int:
    with open(__file__) as fp:
        for lineno, line in enumerate(fp, 1):
            if line.rstrip().endswith(f"# {marker}"):
                return lineno
    raise ValueError(f"No line marked {marker}")
