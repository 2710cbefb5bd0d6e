"""
Data models for the Ault SDK.
"""
from typing import Optional, Union

from pydantic import BaseModel, Field

from .constants import GasConstants


class FeeConfig(BaseModel):
    """Transaction fee: a single coin plus the gas limit"""
    denom: str = GasConstants.DENOM
    amount: Union[int, str] = GasConstants.EIP712_FEE_AMOUNT
    gas: Union[int, str] = GasConstants.EIP712_GAS_LIMIT


class TxContext(BaseModel):
    """Signing context of one transaction; rebuilt for every attempt"""
    chain_id: str = Field(..., alias="chainId")
    account_number: Union[int, str] = Field(..., alias="accountNumber")
    sequence: Union[int, str]
    fee: FeeConfig = Field(default_factory=FeeConfig)
    memo: str = ""

    class Config:
        populate_by_name = True


class AccountInfo(BaseModel):
    """On-chain account state used for signing"""
    account_number: int
    sequence: int
    pubkey_base64: Optional[str] = None


class Network(BaseModel):
    """Static description of an Ault network"""
    name: str
    chain_id: str = Field(..., alias="chainId")
    evm_chain_id: int = Field(..., alias="evmChainId")
    rest_url: str = Field(..., alias="restUrl")
    rpc_url: str = Field(..., alias="rpcUrl")
    evm_rpc_url: str = Field(..., alias="evmRpcUrl")
    indexer_url: Optional[str] = Field(None, alias="indexerUrl")
    explorer_url: Optional[str] = Field(None, alias="explorerUrl")

    class Config:
        populate_by_name = True


class BroadcastResult(BaseModel):
    """Outcome of a sync broadcast; a non-zero code is a chain rejection"""
    tx_hash: str = Field("", alias="txhash")
    code: int = 0
    raw_log: str = ""

    class Config:
        populate_by_name = True


class TxResult(BroadcastResult):
    """Broadcast outcome with a convenience success flag"""
    success: bool = False

    @classmethod
    def from_broadcast(cls, result: BroadcastResult) -> "TxResult":
        return cls(tx_hash=result.tx_hash, code=result.code, raw_log=result.raw_log,
                   success=result.code == 0)
