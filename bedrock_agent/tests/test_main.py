"""
CLI Tests — argument parsing, overrides and exit codes.

Run: python -m pytest bedrock_agent/tests/test_main.py -v
"""

import contextlib
import io
import os
import sys
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from bedrock_agent import main as cli
from bedrock_agent.config.settings import ENV_MAPPINGS, Config
from bedrock_agent.core.errors import ConfigurationError, ErrorCode, TransportError
from bedrock_agent.tests.helpers import MockLLMProvider


def _run_main(argv, provider, env=None):
    clean = {k: v for k, v in os.environ.items() if k not in ENV_MAPPINGS}
    clean.update(env if env is not None else {"BEDROCK_API_KEY": "tok"})
    out, err = io.StringIO(), io.StringIO()
    with patch.dict(os.environ, clean, clear=True), \
            patch.object(cli.BedrockProvider, "from_config", return_value=provider), \
            patch.object(cli, "setup_structured_logging"), \
            contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        with _captured_exit() as code:
            cli.main(argv)
    return code[0], out.getvalue(), err.getvalue()


@contextlib.contextmanager
def _captured_exit():
    code = [None]
    try:
        yield code
    except SystemExit as e:
        code[0] = e.code


class TestParseArgs(unittest.TestCase):

    def test_defaults(self):
        args = cli.parse_args(["hello"])
        self.assertEqual(args.prompt, "hello")
        self.assertIsNone(args.max_iterations)
        self.assertFalse(args.one_shot)
        self.assertEqual(args.verbose, 0)

    def test_overrides_applied(self):
        args = cli.parse_args(["hi", "-m", "m-2", "--max-iterations", "2", "--timeout", "9", "--system", "S"])
        config = Config({})
        cli.apply_overrides(config, args)
        self.assertEqual(config.get("llm.model"), "m-2")
        self.assertEqual(config.get("agent.max_iterations"), 2)
        self.assertEqual(config.get("agent.run_timeout"), 9.0)
        self.assertEqual(config.get("agent.system_prompt"), "S")


class TestExitCodes(unittest.TestCase):

    def test_final_answer(self):
        provider = MockLLMProvider()
        provider.enqueue_text("Here are some options...")
        code, out, _ = _run_main(["find food"], provider)
        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(out.strip(), "Here are some options...")

    def test_missing_credentials(self):
        code, _, err = _run_main(["hi"], MockLLMProvider(), env={})
        self.assertEqual(code, cli.EXIT_CONFIG)
        self.assertIn("credentials.api_key", err)

    def test_missing_config_file(self):
        code, _, err = _run_main(["hi", "-c", "/nonexistent.yaml"], MockLLMProvider())
        self.assertEqual(code, cli.EXIT_CONFIG)
        self.assertIn("Config file not found", err)

    def test_invalid_iteration_budget(self):
        code, out, err = _run_main(["hi", "--max-iterations", "0"], MockLLMProvider())
        self.assertEqual(code, cli.EXIT_CONFIG)
        self.assertIn("max_iterations must be >= 1", err)
        self.assertEqual(out, "")

    def test_configuration_error_during_run(self):
        provider = MockLLMProvider()
        provider.enqueue_error(ConfigurationError("No AWS region derivable", code=ErrorCode.CONFIG_MISSING_REGION))
        code, _, err = _run_main(["hi"], provider)
        self.assertEqual(code, cli.EXIT_CONFIG)
        self.assertIn("No AWS region derivable", err)

    def test_core_error(self):
        provider = MockLLMProvider()
        provider.enqueue_error(TransportError("HTTP error 500", status_code=500))
        code, _, err = _run_main(["hi"], provider)
        self.assertEqual(code, cli.EXIT_ERROR)
        self.assertIn("HTTP error 500", err)

    def test_exhausted(self):
        provider = MockLLMProvider()
        provider.enqueue_tool_call("anything", text="still working")
        code, out, err = _run_main(["hi", "--max-iterations", "1"], provider)
        self.assertEqual(code, cli.EXIT_EXHAUSTED)
        self.assertEqual(out.strip(), "still working")
        self.assertIn("stopped after 1 model calls", err)


if __name__ == "__main__":
    unittest.main()
