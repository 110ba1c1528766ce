"""
Tool Registry Tests — registration, schema export, error-absorbing execution.

Run: python -m pytest bedrock_agent/tests/test_tool_registry.py -v
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from bedrock_agent.core.errors import ErrorCode, UnknownToolError
from bedrock_agent.core.models import ToolCallRequest
from bedrock_agent.core.tool_registry import ToolDefinition, ToolRegistry
from bedrock_agent.tests.helpers import (
    RecordingTool, echo_tool, failing_tool, make_registry, run_async,
)


def _call(name, arguments="{}", call_id="call_1"):
    return ToolCallRequest(id=call_id, name=name, arguments=arguments)


class TestRegistration(unittest.TestCase):

    def test_register_and_lookup(self):
        registry = ToolRegistry()
        registry.register(echo_tool())
        self.assertIn("echo", registry)
        self.assertNotIn("other", registry)
        self.assertEqual(len(registry), 1)
        self.assertEqual(registry.get_tool("echo").name, "echo")

    def test_duplicate_rejected(self):
        registry = make_registry(echo_tool())
        with self.assertRaises(ValueError):
            registry.register(echo_tool())

    def test_unknown_lookup_lists_available(self):
        registry = make_registry(echo_tool("a"), echo_tool("b"))
        with self.assertRaises(UnknownToolError) as ctx:
            registry.get_tool("c")
        self.assertEqual(ctx.exception.available, ["a", "b"])
        self.assertEqual(ctx.exception.code, ErrorCode.TOOL_NOT_FOUND)

    def test_schemas_in_registration_order(self):
        registry = make_registry(echo_tool("b"), echo_tool("a"))
        schemas = registry.get_schemas()
        self.assertEqual([s["function"]["name"] for s in schemas], ["b", "a"])
        self.assertEqual(schemas[0]["function"]["parameters"]["properties"]["text"]["type"], "string")

    def test_default_parameters_schema(self):
        tool = ToolDefinition(name="noargs", description="d", executor=lambda a: "ok")
        self.assertEqual(tool.to_dict()["function"]["parameters"], {"type": "object", "properties": {}})


class TestExecution(unittest.TestCase):

    def test_sync_tool(self):
        result = run_async(make_registry(echo_tool()).execute_tool(_call("echo", '{"text":"hi"}')))
        self.assertTrue(result.success)
        self.assertEqual(result.tool_call_id, "call_1")
        self.assertEqual(result.to_message_content(), '{"echo": {"text": "hi"}}')

    def test_async_tool_gets_raw_arguments(self):
        tool = RecordingTool(result="done")
        registry = make_registry(ToolDefinition(name="rec", description="", executor=tool))
        result = run_async(registry.execute_tool(_call("rec", "raw text, not json")))
        self.assertEqual(result.output, "done")
        self.assertEqual(tool.received, ["raw text, not json"])

    def test_unknown_tool_becomes_error_result(self):
        result = run_async(ToolRegistry().execute_tool(_call("ghost", call_id="c9")))
        self.assertFalse(result.success)
        self.assertEqual(result.tool_call_id, "c9")
        self.assertEqual(result.to_message_content(), "Error: Unknown tool: ghost")

    def test_raising_tool_becomes_error_result(self):
        result = run_async(make_registry(failing_tool()).execute_tool(_call("failing_tool")))
        self.assertFalse(result.success)
        self.assertEqual(result.to_message_content(), "Error: Tool execution failed: Always fails!")

    def test_non_string_result_becomes_error_result(self):
        registry = make_registry(ToolDefinition(name="bad", description="", executor=lambda a: {"x": 1}))
        result = run_async(registry.execute_tool(_call("bad")))
        self.assertFalse(result.success)
        self.assertEqual(
            result.to_message_content(),
            "Error: Tool execution failed: Tool returned dict, expected str",
        )


if __name__ == "__main__":
    unittest.main()
