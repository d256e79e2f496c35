from types import TracebackType
from typing import TYPE_CHECKING, Any, Callable, Generator, Self

from lodgetix.platform.logging.loguru_io_config import GeneratorMethod
from lodgetix.platform.logging.loguru_io_utils import reset_call_depth


if TYPE_CHECKING:
    from lodgetix.platform.logging.loguru_io import LoguruIO


class GeneratorWrapper:
    """Forwards generator protocol calls and logs every step through LoguruIO"""

    def __init__(self, gen_obj: Generator[Any, Any, Any], loguru_io: 'LoguruIO') -> None:
        self.gen_obj = gen_obj
        self._io = loguru_io

    def __iter__(self) -> Self:
        return self

    def _step(self, method: GeneratorMethod, call: Callable[[], Any], logged_input: Any) -> Any:
        try:
            self._io.log_args_kwargs_content(logged_input, yield_method=method)
            out = call()
            self._io.log_return_content(out, yield_method=method)
            return out
        except StopIteration as e:
            self._io.log_return_content(e.value, yield_method=method)
            raise
        finally:
            reset_call_depth()

    def __next__(self) -> Any:
        return self._step(GeneratorMethod.NEXT, lambda: next(self.gen_obj), None)

    def send(self, value: Any) -> Any:
        return self._step(GeneratorMethod.SEND, lambda: self.gen_obj.send(value), value)

    def throw(
        self,
        exc_type: type[BaseException],
        exc_val: BaseException | None = None,
        tb: TracebackType | None = None,
    ) -> Any:
        exc = exc_val if exc_val is not None else exc_type()
        if tb is not None:
            exc = exc.with_traceback(tb)
        return self._step(GeneratorMethod.THROW, lambda: self.gen_obj.throw(exc), exc_type)

    def close(self) -> None:
        self.gen_obj.close()
