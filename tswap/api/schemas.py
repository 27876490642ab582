"""Request and response models for the tswap API."""

from pydantic import BaseModel, Field

from tswap.models.types import Address, Uint256


class TokenCreate(BaseModel):
    """Deploy a new token."""

    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    decimals: int = Field(default=18, ge=0, le=77)


class TokenInfo(BaseModel):
    address: Address
    name: str
    symbol: str
    decimals: int
    total_supply: Uint256


class MintRequest(BaseModel):
    account: Address
    amount: Uint256


class ApproveRequest(BaseModel):
    owner: Address
    spender: Address
    amount: Uint256


class BalanceResponse(BaseModel):
    token: Address
    account: Address
    balance: Uint256


class PoolCreate(BaseModel):
    """Create the pool for a deployed token."""

    token: Address


class PoolInfo(BaseModel):
    """Snapshot of a pool's identity and reserves."""

    address: Address
    reference_token: Address
    paired_token: Address
    share_name: str
    share_symbol: str
    reserve_reference: Uint256
    reserve_paired: Uint256
    total_shares: Uint256
    state: str


class DepositRequest(BaseModel):
    caller: Address
    reference_amount: Uint256
    min_shares_to_mint: Uint256 = 0
    max_paired_to_deposit: Uint256
    deadline: int


class DepositResponse(BaseModel):
    shares_minted: Uint256


class WithdrawRequest(BaseModel):
    caller: Address
    shares_to_burn: Uint256
    min_reference_out: Uint256
    min_paired_out: Uint256
    deadline: int


class WithdrawResponse(BaseModel):
    reference_out: Uint256
    paired_out: Uint256


class SwapRequest(BaseModel):
    caller: Address
    input_token: Address
    input_amount: Uint256
    output_token: Address
    min_output_amount: Uint256 = 0
    deadline: int


class SwapResponse(BaseModel):
    output_amount: Uint256


class QuoteResponse(BaseModel):
    input_token: Address
    input_amount: Uint256
    output_token: Address
    output_amount: Uint256


class ErrorResponse(BaseModel):
    """Body returned for rejected operations."""

    error: str
    detail: str
