#!/usr/bin/env python3
"""MCP Server for the Calculator Suite.

This server exposes the calculator modes as MCP tools, allowing AI
assistants to run keypad calculations, conversions, loan and date math.
"""

import os
import sys
import json
import asyncio
from typing import Any

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from loguru import logger
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from settings import load_settings
from tools import CalculatorTools


# Create the MCP server
server = Server("calc-suite")

# Global tools instance (initialized on startup)
tools: CalculatorTools | None = None


def get_tools() -> CalculatorTools:
    """Get or initialize the tools instance."""
    global tools
    if tools is None:
        # Settings file can be set via CALC_SUITE_SETTINGS env var
        tools = CalculatorTools(load_settings(os.environ.get('CALC_SUITE_SETTINGS')))
    return tools


SESSION_PARAM = {
    "type": "string",
    "description": "Name of the keypad session. Calls with the same name continue the same calculation. Defaults to 'default'."
}

NUMBER_PARAM = {"type": "number"}


def _loan_schema(extra: dict = None) -> dict:
    properties = {
        "principal": {"type": "number", "description": "Amount borrowed or invested"},
        "annual_rate_percent": {"type": "number", "description": "Annual interest rate in percent, e.g. 6.5"},
        "years": {"type": "number", "description": "Term in years"},
    }
    properties.update(extra or {})
    return {
        "type": "object",
        "properties": properties,
        "required": ["principal", "annual_rate_percent", "years"]
    }


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available calculator tools."""
    return [
        Tool(
            name="press_keys",
            description="Press calculator keys in order, like on a keypad. Keys: digits, '.', + - * / ^ root, =, %, AC, MC MR M+ M-, sqrt square cube sin cos tan log ln, NOT LSH RSH. Returns the display.",
            inputSchema={
                "type": "object",
                "properties": {
                    "keys": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Keys to press, e.g. ['12', '+', '30', '=']"
                    },
                    "session": SESSION_PARAM
                },
                "required": ["keys"]
            }
        ),
        Tool(
            name="calculate",
            description="Apply one binary operator (+, -, *, /, pow, root) to two numbers.",
            inputSchema={
                "type": "object",
                "properties": {
                    "a": NUMBER_PARAM,
                    "b": NUMBER_PARAM,
                    "operator": {"type": "string", "description": "+, -, *, /, pow or root"}
                },
                "required": ["a", "b", "operator"]
            }
        ),
        Tool(
            name="scientific",
            description="Apply a scientific function (sqrt, square, cube, sin, cos, tan in degrees, log, ln).",
            inputSchema={
                "type": "object",
                "properties": {
                    "function": {"type": "string"},
                    "value": NUMBER_PARAM,
                    "precision": {"type": "integer", "description": "Decimal places (default 8)"}
                },
                "required": ["function", "value"]
            }
        ),
        Tool(
            name="get_history",
            description="Get recent calculations, newest first. Scope 'session' returns the last 10 of one keypad session; 'all' returns the last 50 across sessions.",
            inputSchema={
                "type": "object",
                "properties": {
                    "session": SESSION_PARAM,
                    "scope": {"type": "string", "enum": ["session", "all"]}
                },
                "required": []
            }
        ),
        Tool(
            name="clear_history",
            description="Clear the history of a keypad session.",
            inputSchema={
                "type": "object",
                "properties": {"session": SESSION_PARAM},
                "required": []
            }
        ),
        Tool(
            name="convert_base",
            description="Convert an integer between bases 2 to 36.",
            inputSchema={
                "type": "object",
                "properties": {
                    "digits": {"type": "string"},
                    "from_base": {"type": "integer"},
                    "to_base": {"type": "integer"}
                },
                "required": ["digits", "from_base", "to_base"]
            }
        ),
        Tool(
            name="bitwise",
            description="Apply a 32-bit NOT, LSH (shift left one) or RSH (shift right one) to an integer.",
            inputSchema={
                "type": "object",
                "properties": {
                    "digits": {"type": "string"},
                    "base": {"type": "integer"},
                    "operation": {"type": "string", "enum": ["NOT", "LSH", "RSH"]}
                },
                "required": ["digits", "base", "operation"]
            }
        ),
        Tool(
            name="loan_payment",
            description="Monthly payment (EMI), total paid and total interest for a loan or mortgage.",
            inputSchema=_loan_schema({
                "kind": {"type": "string", "enum": ["loan", "mortgage"]}
            })
        ),
        Tool(
            name="amortization_schedule",
            description="Month-by-month amortization schedule with principal, interest and remaining balance.",
            inputSchema=_loan_schema({
                "max_rows": {"type": "integer", "description": "Optional: return only the first N payments"}
            })
        ),
        Tool(
            name="future_value",
            description="Future value of a lump sum with monthly compounding.",
            inputSchema=_loan_schema()
        ),
        Tool(
            name="date_difference",
            description="Days between two ISO dates, with an approximate years/months/days breakdown (365-day years, 30-day months).",
            inputSchema={
                "type": "object",
                "properties": {
                    "start": {"type": "string", "description": "YYYY-MM-DD"},
                    "end": {"type": "string", "description": "YYYY-MM-DD"}
                },
                "required": ["start", "end"]
            }
        ),
        Tool(
            name="add_period",
            description="Add (or with a negative amount, subtract) days, months or years to a date. Month ends are clamped.",
            inputSchema={
                "type": "object",
                "properties": {
                    "start": {"type": "string", "description": "YYYY-MM-DD"},
                    "amount": {"type": "integer"},
                    "unit": {"type": "string", "enum": ["days", "months", "years"]}
                },
                "required": ["start", "amount", "unit"]
            }
        ),
        Tool(
            name="convert_units",
            description="Convert a value between units of length, mass, temperature, area, volume or time.",
            inputSchema={
                "type": "object",
                "properties": {
                    "value": NUMBER_PARAM,
                    "from_unit": {"type": "string"},
                    "to_unit": {"type": "string"},
                    "category": {"type": "string", "description": "Optional: inferred from from_unit"}
                },
                "required": ["value", "from_unit", "to_unit"]
            }
        ),
        Tool(
            name="list_units",
            description="List unit names for one category or all categories.",
            inputSchema={
                "type": "object",
                "properties": {"category": {"type": "string"}},
                "required": []
            }
        ),
        Tool(
            name="exchange",
            description="Convert money between currencies using live rates. Requires an exchange rate API key.",
            inputSchema={
                "type": "object",
                "properties": {
                    "amount": NUMBER_PARAM,
                    "from_currency": {"type": "string"},
                    "to_currency": {"type": "string"}
                },
                "required": ["amount", "from_currency", "to_currency"]
            }
        ),
        Tool(
            name="get_quote",
            description="Live stock quote (ticker) or crypto quote (CoinGecko id).",
            inputSchema={
                "type": "object",
                "properties": {
                    "symbol": {"type": "string"},
                    "asset_type": {"type": "string", "enum": ["stock", "crypto"]}
                },
                "required": ["symbol"]
            }
        ),
        Tool(
            name="popular_quotes",
            description="Live quotes for the configured popular stocks and cryptocurrencies.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": []
            }
        ),
        Tool(
            name="flip_coin",
            description="Flip a fair coin one or more times and return running statistics.",
            inputSchema={
                "type": "object",
                "properties": {"count": {"type": "integer"}},
                "required": []
            }
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        calc_tools = get_tools()
        session = arguments.get("session")

        if name == "press_keys":
            result = calc_tools.press_keys(arguments["keys"], session)
        elif name == "calculate":
            result = calc_tools.calculate(arguments["a"], arguments["b"], arguments["operator"])
        elif name == "scientific":
            result = calc_tools.scientific(
                arguments["function"], arguments["value"], arguments.get("precision", 8)
            )
        elif name == "get_history":
            result = calc_tools.get_history(session, arguments.get("scope", "session"))
        elif name == "clear_history":
            result = calc_tools.clear_history(session)
        elif name == "convert_base":
            result = calc_tools.convert_base(
                arguments["digits"], arguments["from_base"], arguments["to_base"]
            )
        elif name == "bitwise":
            result = calc_tools.bitwise(arguments["digits"], arguments["base"], arguments["operation"])
        elif name == "loan_payment":
            result = calc_tools.loan_payment(
                arguments["principal"],
                arguments["annual_rate_percent"],
                arguments["years"],
                arguments.get("kind", "loan")
            )
        elif name == "amortization_schedule":
            result = calc_tools.amortization_schedule(
                arguments["principal"],
                arguments["annual_rate_percent"],
                arguments["years"],
                arguments.get("max_rows")
            )
        elif name == "future_value":
            result = calc_tools.future_value(
                arguments["principal"], arguments["annual_rate_percent"], arguments["years"]
            )
        elif name == "date_difference":
            result = calc_tools.date_difference(arguments["start"], arguments["end"])
        elif name == "add_period":
            result = calc_tools.add_period(arguments["start"], arguments["amount"], arguments["unit"])
        elif name == "convert_units":
            result = calc_tools.convert_units(
                arguments["value"],
                arguments["from_unit"],
                arguments["to_unit"],
                arguments.get("category")
            )
        elif name == "list_units":
            result = calc_tools.list_units(arguments.get("category"))
        elif name == "exchange":
            result = await calc_tools.exchange(
                arguments["amount"], arguments["from_currency"], arguments["to_currency"]
            )
        elif name == "get_quote":
            result = await calc_tools.get_quote(arguments["symbol"], arguments.get("asset_type", "stock"))
        elif name == "popular_quotes":
            result = await calc_tools.popular_quotes()
        elif name == "flip_coin":
            result = calc_tools.flip_coin(arguments.get("count", 1))
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]
    except Exception as e:
        logger.warning("Tool {} failed: {}", name, e)
        return [TextContent(
            type="text",
            text=json.dumps({"error": str(e)}, indent=2)
        )]


async def main():
    """Run the MCP server."""
    calc_tools = get_tools()
    if calc_tools.start_rate_polling():
        logger.info("Refreshing exchange rates every {}s", calc_tools.settings.exchange.refresh_interval_seconds)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await calc_tools.close()


if __name__ == "__main__":
    asyncio.run(main())
