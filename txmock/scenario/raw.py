"""
txmock Scenario: Raw Fixture Models

Loosely typed mirror of the scenario JSON. Value fields stay as raw
literals (strings, numbers, lists); they are resolved later against a
shared InterpreterContext.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

class RawModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

class TxDctRaw(RawModel):
    token_identifier: Any = Field(alias="tokenIdentifier")
    nonce: Any = None
    amount: Any = None
    value: Any = None  # legacy spelling of amount

class TxCallRaw(RawModel):
    from_: Any = Field(alias="from")
    to: Any
    value: Any = None          # legacy spelling of the native amount
    moax_value: Any = Field(default=None, alias="moaxValue")
    native_amount: Any = Field(default=None, alias="nativeAmount")
    dct_value: List[TxDctRaw] = Field(default_factory=list, alias="dctValue")
    function: str = ""
    arguments: List[Any] = Field(default_factory=list)
    gas_limit: Any = Field(default=None, alias="gasLimit")
    gas_price: Any = Field(default=None, alias="gasPrice")

class CheckLogRaw(RawModel):
    address: Any = None
    endpoint: Any = None
    topics: Any = None
    data: Any = None

class TxExpectRaw(RawModel):
    out: Any = None
    status: Any = None
    message: Any = None
    logs: Any = None
    gas: Any = None
    refund: Any = None

class AccountRaw(RawModel):
    comment: Optional[str] = None
    nonce: Any = None
    balance: Any = None
    dct: Any = None
    storage: Any = None
    code: Any = None
    owner: Any = None

class SetStateStepRaw(RawModel):
    step: Literal["setState"]
    comment: Optional[str] = None
    accounts: Dict[str, AccountRaw] = Field(default_factory=dict)

class TxStepRaw(RawModel):
    step: Literal["scCall", "scQuery", "transfer"]
    id: str = Field(default="", validation_alias=AliasChoices("id", "txId"))
    comment: Optional[str] = None
    display_logs: Optional[bool] = Field(default=None, alias="displayLogs")
    tx: TxCallRaw
    expect: Optional[TxExpectRaw] = None

class CheckStateStepRaw(RawModel):
    step: Literal["checkState"]
    id: str = ""
    comment: Optional[str] = None
    # values are AccountRaw-shaped dicts, or "*"; the "+" key allows unlisted accounts
    accounts: Dict[str, Any] = Field(default_factory=dict)

StepRaw = Annotated[
    Union[SetStateStepRaw, TxStepRaw, CheckStateStepRaw],
    Field(discriminator="step"),
]

class ScenarioRaw(RawModel):
    name: str = ""
    comment: Optional[str] = None
    gas_schedule: Optional[str] = Field(default=None, alias="gasSchedule")
    steps: List[StepRaw] = Field(default_factory=list)
