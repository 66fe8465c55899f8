"""
txmock VM: Contract Definitions

Contracts are plain classes. Endpoints are methods marked with @endpoint
(or @callback for async call callbacks); each receives the frame's
CallContext followed by the raw argument bytes.
"""
import inspect
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Type
from ..core.errors import ArgumentCountError

@dataclass(frozen=True)
class EndpointSpec:
    name: str
    attr: str
    gas_cost: Optional[int] = None  # overrides EngineConfig.frame_gas_cost
    is_callback: bool = False
    min_args: int = 0
    max_args: Optional[int] = None  # None for *args endpoints

    def accepts(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

def _argument_bounds(fn: Callable) -> Tuple[int, Optional[int]]:
    """
    (required, maximum) argument count of an endpoint method,
    not counting self and the call context.
    """
    params = list(inspect.signature(fn).parameters.values())[2:]
    positional = [p for p in params
                  if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)]
    required = sum(1 for p in positional if p.default is inspect.Parameter.empty)
    if any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in params):
        return required, None
    return required, len(positional)

def endpoint(name=None, gas_cost: Optional[int] = None):
    """
    Marks a contract method as callable.
    Usable bare (@endpoint) or with options (@endpoint("name", gas_cost=...)).
    """
    if callable(name):
        name._txmock_endpoint = (None, None, False)
        return name

    def decorate(fn: Callable) -> Callable:
        fn._txmock_endpoint = (name, gas_cost, False)
        return fn
    return decorate

def callback(fn: Callable) -> Callable:
    fn._txmock_endpoint = (None, None, True)
    return fn

class Contract:
    """
    Base class for mock contracts. Subclasses hold no state of their own;
    everything persistent goes through ctx.storage.
    """
    _endpoints: Dict[str, EndpointSpec] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        endpoints = {}
        for attr in dir(cls):
            fn = getattr(cls, attr, None)
            marker = getattr(fn, "_txmock_endpoint", None)
            if marker is None:
                continue
            name, gas_cost, is_callback = marker
            min_args, max_args = _argument_bounds(fn)
            spec = EndpointSpec(name=name or attr, attr=attr, gas_cost=gas_cost, is_callback=is_callback,
                                min_args=min_args, max_args=max_args)
            endpoints[spec.name] = spec
        cls._endpoints = endpoints

    @classmethod
    def endpoint_names(cls):
        return sorted(cls._endpoints)

    def find_endpoint(self, name: str) -> Optional[EndpointSpec]:
        return self._endpoints.get(name)

    def invoke(self, spec: EndpointSpec, ctx, arguments):
        if not spec.accepts(len(arguments)):
            raise ArgumentCountError()
        return getattr(self, spec.attr)(ctx, *arguments)

class ContractRegistry:
    """
    Maps contract code names (as referenced by account "code" fields)
    to contract classes.
    """
    def __init__(self):
        self._classes: Dict[str, Type[Contract]] = {}
        self._instances: Dict[str, Contract] = {}

    def register(self, code: str, contract_cls: Type[Contract]) -> "ContractRegistry":
        if code in self._classes:
            raise ValueError(f"contract code {code!r} already registered")
        self._classes[code] = contract_cls
        return self

    def get(self, code: str) -> Optional[Contract]:
        if code not in self._classes:
            return None
        if code not in self._instances:
            self._instances[code] = self._classes[code]()
        return self._instances[code]

    def __contains__(self, code: str) -> bool:
        return code in self._classes

    def names(self):
        return sorted(self._classes)
