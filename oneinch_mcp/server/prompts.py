"""Prompt templates for common DeFi analysis tasks."""

from __future__ import annotations

from typing import Optional

from mcp.server.fastmcp import FastMCP

from .formatting import chain_name


def _chain_or_default(chain_id: Optional[str], default: Optional[int]) -> Optional[int]:
    if chain_id is None or not str(chain_id).strip():
        return default
    try:
        return int(str(chain_id).strip())
    except ValueError:
        return default


def swap_analysis_prompt(src_token: str, dst_token: str, amount: str, chain_id: str = "1") -> str:
    chain = _chain_or_default(chain_id, 1)
    return (
        f"Analyze the best way to swap {amount} {src_token} to {dst_token} "
        f"on {chain_name(chain)} (Chain ID: {chain}).\n\n"
        "Please provide a comprehensive analysis including:\n"
        "1. **Route Analysis**: use the get_swap_quote tool to find the optimal route\n"
        "2. **Price Impact**: estimate price impact and slippage for this trade size\n"
        "3. **Allowance**: use check_allowance to see whether an approval is needed first\n"
        "4. **Alternatives**: compare with get_fusion_quote for a gasless Fusion order\n"
        "5. **Risk Assessment**: use analyze_token on both tokens and flag anything unusual\n\n"
        "Consider liquidity depth, gas costs and protocol reliability. "
        "Finish with specific, actionable recommendations."
    )


def portfolio_review_prompt(address: str, timeframe: str = "30d", chain_id: Optional[str] = None) -> str:
    chain = _chain_or_default(chain_id, None)
    if chain is None:
        scope = " across all supported chains"
    else:
        scope = f" on {chain_name(chain)} (Chain ID: {chain})"
    return (
        f"Analyze portfolio performance for address {address} over {timeframe}{scope}.\n\n"
        "Please provide a portfolio review including:\n"
        "1. **Overview**: use get_portfolio_value for the current valuation and breakdown\n"
        "2. **Holdings**: use get_wallet_balances and analyze_token for the largest positions\n"
        "3. **Activity**: use get_history to summarise recent transactions\n"
        "4. **Open Orders**: use get_limit_orders to list outstanding limit orders\n\n"
        "Focus on allocation, concentration risk and diversification across protocols and chains. "
        "Provide actionable recommendations for improvement."
    )


def market_report_prompt(chain_id: str = "1", tokens: str = "") -> str:
    chain = _chain_or_default(chain_id, 1)
    focus = tokens.strip() or "the most liquid tokens"
    return (
        f"Generate a DeFi market report for {focus} on {chain_name(chain)} (Chain ID: {chain}).\n\n"
        "Please cover:\n"
        "1. **Prices**: use get_token_prices for current spot prices\n"
        "2. **Trends**: use analyze_token to compare recent price changes\n"
        "3. **Liquidity**: use get_quick_quote on representative pairs to gauge depth\n\n"
        "Format the report with an executive summary, per-token analysis, "
        "risks and opportunities."
    )


def register_prompts(mcp: FastMCP) -> None:
    @mcp.prompt(name="swap_analysis", description="Analyse a token swap and recommend how to execute it")
    def swap_analysis(src_token: str, dst_token: str, amount: str, chain_id: str = "1") -> str:
        return swap_analysis_prompt(src_token, dst_token, amount, chain_id)

    @mcp.prompt(name="portfolio_review", description="Review a wallet portfolio and its performance")
    def portfolio_review(address: str, timeframe: str = "30d", chain_id: Optional[str] = None) -> str:
        return portfolio_review_prompt(address, timeframe, chain_id)

    @mcp.prompt(name="market_report", description="Summarise market conditions for a chain")
    def market_report(chain_id: str = "1", tokens: str = "") -> str:
        return market_report_prompt(chain_id, tokens)


__all__ = [
    "market_report_prompt",
    "portfolio_review_prompt",
    "register_prompts",
    "swap_analysis_prompt",
]
