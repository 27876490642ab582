"""API endpoints for the tswap exchange."""

from __future__ import annotations

from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from tswap.amm.pool import LiquidityPool
from tswap.api.schemas import (
    ApproveRequest,
    BalanceResponse,
    DepositRequest,
    DepositResponse,
    MintRequest,
    PoolCreate,
    PoolInfo,
    QuoteResponse,
    SwapRequest,
    SwapResponse,
    TokenCreate,
    TokenInfo,
    WithdrawRequest,
    WithdrawResponse,
)
from tswap.exchange import Exchange, create_default_exchange
from tswap.tokens.erc20 import ERC20

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_exchange() -> Exchange:
    """Dependency provider for the exchange instance.

    Override this in tests to inject a fresh exchange:
        app.dependency_overrides[get_exchange] = lambda: exchange

    Returns:
        The exchange served by this process.
    """
    return create_default_exchange()


def _token(exchange: Exchange, address: str) -> ERC20:
    try:
        return exchange.token(address)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown token {address}") from None


def _pool(exchange: Exchange, address: str) -> LiquidityPool:
    try:
        return exchange.pool(address)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown pool {address}") from None


def _token_info(token: ERC20) -> TokenInfo:
    return TokenInfo(
        address=token.address,
        name=token.name,
        symbol=token.symbol,
        decimals=token.decimals,
        total_supply=token.total_supply(),
    )


def _pool_info(pool: LiquidityPool) -> PoolInfo:
    reserve_reference, reserve_paired = pool.get_reserves()
    return PoolInfo(
        address=pool.address,
        reference_token=pool.reference_token.address,
        paired_token=pool.paired_token.address,
        share_name=pool.share_token.name,
        share_symbol=pool.share_token.symbol,
        reserve_reference=reserve_reference,
        reserve_paired=reserve_paired,
        total_shares=pool.total_shares(),
        state=pool.state.value,
    )


# --- Tokens ---


@router.get("/reference")
def get_reference(exchange: Exchange = Depends(get_exchange)) -> TokenInfo:
    """The reference token every pool trades against."""
    return _token_info(exchange.reference_token)


@router.post("/tokens", status_code=201)
def deploy_token(body: TokenCreate, exchange: Exchange = Depends(get_exchange)) -> TokenInfo:
    token = exchange.deploy_token(body.name, body.symbol, body.decimals)
    return _token_info(token)


@router.get("/tokens/{token}")
def get_token(token: str, exchange: Exchange = Depends(get_exchange)) -> TokenInfo:
    return _token_info(_token(exchange, token))


@router.post("/tokens/{token}/mint")
def mint(token: str, body: MintRequest, exchange: Exchange = Depends(get_exchange)) -> BalanceResponse:
    """Credit an account with freshly minted tokens (test faucet)."""
    erc20 = _token(exchange, token)
    if exchange.registry.pool_at(erc20.address) is not None:
        raise HTTPException(status_code=403, detail="Share tokens are minted by their pool only")
    erc20.mint(body.account, body.amount)
    return BalanceResponse(token=erc20.address, account=body.account, balance=erc20.balance_of(body.account))


@router.post("/tokens/{token}/approve", status_code=204)
def approve(token: str, body: ApproveRequest, exchange: Exchange = Depends(get_exchange)) -> None:
    _token(exchange, token).approve(body.owner, body.spender, body.amount)


@router.get("/tokens/{token}/balances/{account}")
def balance(token: str, account: str, exchange: Exchange = Depends(get_exchange)) -> BalanceResponse:
    erc20 = _token(exchange, token)
    return BalanceResponse(token=erc20.address, account=account, balance=erc20.balance_of(account))


# --- Pools ---


@router.post("/pools", status_code=201)
def create_pool(body: PoolCreate, exchange: Exchange = Depends(get_exchange)) -> PoolInfo:
    _token(exchange, body.token)
    pool = exchange.create_pool(body.token)
    return _pool_info(pool)


@router.get("/pools")
def list_pools(exchange: Exchange = Depends(get_exchange)) -> list[PoolInfo]:
    return [_pool_info(pool) for pool in exchange.registry.all_pools()]


@router.get("/pools/by-token/{token}")
def get_pool_by_token(token: str, exchange: Exchange = Depends(get_exchange)) -> PoolInfo:
    address = exchange.registry.get_pool(token)
    if address is None:
        raise HTTPException(status_code=404, detail=f"No pool for token {token}")
    return _pool_info(_pool(exchange, address))


@router.get("/pools/{pool}")
def get_pool(pool: str, exchange: Exchange = Depends(get_exchange)) -> PoolInfo:
    return _pool_info(_pool(exchange, pool))


@router.post("/pools/{pool}/deposit")
def deposit(pool: str, body: DepositRequest, exchange: Exchange = Depends(get_exchange)) -> DepositResponse:
    shares = _pool(exchange, pool).deposit(
        body.caller,
        body.reference_amount,
        body.min_shares_to_mint,
        body.max_paired_to_deposit,
        body.deadline,
    )
    return DepositResponse(shares_minted=shares)


@router.post("/pools/{pool}/withdraw")
def withdraw(
    pool: str, body: WithdrawRequest, exchange: Exchange = Depends(get_exchange)
) -> WithdrawResponse:
    reference_out, paired_out = _pool(exchange, pool).withdraw(
        body.caller,
        body.shares_to_burn,
        body.min_reference_out,
        body.min_paired_out,
        body.deadline,
    )
    return WithdrawResponse(reference_out=reference_out, paired_out=paired_out)


@router.post("/pools/{pool}/swap")
def swap(pool: str, body: SwapRequest, exchange: Exchange = Depends(get_exchange)) -> SwapResponse:
    output_amount = _pool(exchange, pool).swap(
        body.caller,
        body.input_token,
        body.input_amount,
        body.output_token,
        deadline=body.deadline,
        min_output_amount=body.min_output_amount,
    )
    return SwapResponse(output_amount=output_amount)


@router.get("/pools/{pool}/quote")
def quote(
    pool: str,
    input_token: str = Query(...),
    input_amount: int = Query(..., gt=0),
    exchange: Exchange = Depends(get_exchange),
) -> QuoteResponse:
    """Price an exact-input swap at the current reserves without executing it."""
    liquidity_pool = _pool(exchange, pool)
    token_in = _token(exchange, input_token)
    if token_in.address == liquidity_pool.reference_token.address:
        token_out = liquidity_pool.paired_token
    elif token_in.address == liquidity_pool.paired_token.address:
        token_out = liquidity_pool.reference_token
    else:
        raise HTTPException(status_code=400, detail=f"Token {input_token} not in pool {pool}")

    output_amount = liquidity_pool.math.get_output_amount_based_on_input(
        input_amount,
        token_in.balance_of(liquidity_pool.address),
        token_out.balance_of(liquidity_pool.address),
    )
    return QuoteResponse(
        input_token=token_in.address,
        input_amount=input_amount,
        output_token=token_out.address,
        output_amount=output_amount,
    )
