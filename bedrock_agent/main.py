"""
Main entry point — parse args, load config, run one orchestration.
"""

from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from typing import Optional

from .config.settings import Config, load_config, validate_required_configuration
from .core.agent import Agent
from .core.cancellation import CancellationToken
from .core.credentials import ConfigCredentialResolver
from .core.errors import AgentCoreError, ConfigurationError
from .core.models import FinalAnswer
from .core.providers.bedrock_provider import BedrockProvider
from .core.structured_logger import setup_structured_logging
from .core.tool_registry import ToolRegistry

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_EXHAUSTED = 3


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bedrock-agent",
        description="Run a tool-calling agent against a Bedrock chat-completions endpoint",
    )
    parser.add_argument("prompt", help="User request to send to the agent")
    parser.add_argument(
        "-c", "--config",
        help="Path to config YAML file",
        default=None,
    )
    parser.add_argument(
        "-m", "--model",
        help="Model id to use (overrides llm.model)",
        default=None,
    )
    parser.add_argument(
        "--system",
        help="System prompt (overrides agent.system_prompt)",
        default=None,
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Maximum model calls per run (default: 5)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Whole-run deadline in seconds (overrides agent.run_timeout)",
    )
    parser.add_argument(
        "--one-shot",
        action="store_true",
        help="Single completion without the tool loop",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    )
    return parser.parse_args(argv)


def apply_overrides(config: Config, args: argparse.Namespace) -> None:
    if args.model:
        config.set("llm.model", args.model)
    if args.system:
        config.set("agent.system_prompt", args.system)
    if args.max_iterations is not None:
        config.set("agent.max_iterations", args.max_iterations)
    if args.timeout is not None:
        config.set("agent.run_timeout", args.timeout)


async def run_once(config: Config, args: argparse.Namespace) -> int:
    provider = BedrockProvider.from_config(config, ConfigCredentialResolver(config))
    system_prompt = config.get("agent.system_prompt", "")

    if args.one_shot:
        text = await provider.complete(system_prompt, args.prompt)
        print(text)
        return EXIT_OK

    agent = Agent(
        provider=provider,
        registry=ToolRegistry(),
        max_iterations=int(config.get("agent.max_iterations", 5)),
        system_prompt=system_prompt,
    )
    run_timeout = config.get("agent.run_timeout")
    token = CancellationToken(timeout=float(run_timeout) if run_timeout else None)
    result = await agent.run(args.prompt, cancel_token=token)

    if isinstance(result, FinalAnswer):
        print(result.text)
        return EXIT_OK
    print(result.last_text)
    print(f"[stopped after {result.model_calls} model calls]", file=sys.stderr)
    return EXIT_EXHAUSTED


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except AgentCoreError as e:
        print(e.full_message(), file=sys.stderr)
        sys.exit(EXIT_CONFIG)
    apply_overrides(config, args)

    if args.verbose >= 2:
        log_level = "DEBUG"
    elif args.verbose >= 1:
        log_level = "INFO"
    else:
        log_level = config.get("logging.level", "WARNING")
    setup_structured_logging(
        json_mode=config.get("logging.format", "human") == "json",
        level=log_level,
    )
    logger = logging.getLogger(__name__)

    missing = validate_required_configuration(config)
    if missing:
        print(f"Missing required configuration: {', '.join(missing)}", file=sys.stderr)
        sys.exit(EXIT_CONFIG)

    try:
        code = asyncio.run(run_once(config, args))
    except ConfigurationError as e:
        print(e.full_message(), file=sys.stderr)
        sys.exit(EXIT_CONFIG)
    except AgentCoreError as e:
        logger.debug(f"Run failed: {e!r}")
        print(e.full_message(), file=sys.stderr)
        sys.exit(EXIT_ERROR)
    except KeyboardInterrupt:
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
