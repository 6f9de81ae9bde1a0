"""
Integration tests for the chat-completion client.

Tests plain, tool-augmented and streamed completions against a mocked
HTTP transport, including error statuses, undecodable bodies and
streams that fail part way.
"""
import json

import httpx
import pytest
from pydantic import ValidationError

from gateway_clients import (
    ChatClient,
    DebugTrace,
    FunctionDefinition,
    GatewayConnectionError,
    GatewayDecodeError,
    GatewayEmptyResponseError,
    GatewayRequestError,
    GatewayStreamError,
    Message,
    Tool,
)
from gateway_clients.core.interface import ClientCapability

API_KEY = "sk-test-key"

CANNED_SSE = (
    b'data: {"choices":[{"delta":{"content":"He"}}]}\n\n'
    b'data: {"choices":[{"delta":{"content":"llo"}}]}\n\n'
    b"data: [DONE]\n\n"
)


class TrackingStream(httpx.SyncByteStream):
    """Byte stream that can fail after its chunks and records closing."""

    def __init__(self, chunks, error: Exception = None):
        self.chunks = chunks
        self.error = error
        self.closed = False

    def __iter__(self):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    def close(self):
        self.closed = True


class Recorder:
    """MockTransport handler replying with a fixed status and body or stream."""

    def __init__(self, status_code: int = 200, content: bytes = b"", stream: httpx.SyncByteStream = None,
                 error: Exception = None):
        self.status_code = status_code
        self.content = content
        self.stream = stream
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.stream is not None:
            return httpx.Response(self.status_code, stream=self.stream)
        return httpx.Response(self.status_code, content=self.content)

    def body(self, index: int = 0):
        return json.loads(self.requests[index].content)


def completion(message: dict) -> bytes:
    return json.dumps({
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "model": "gpt-4o-mini",
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7},
    }).encode()


def make_client(recorder: Recorder) -> ChatClient:
    return ChatClient(
        api_key=API_KEY,
        model="gpt-4o-mini",
        http_client=httpx.Client(transport=httpx.MockTransport(recorder)),
        debug=DebugTrace(enabled=False),
    )


@pytest.fixture
def messages():
    return [
        Message(role="system", content="You are helpful"),
        Message(role="user", content="Hello"),
    ]


@pytest.fixture
def lookup_tool():
    return Tool(function=FunctionDefinition(
        name="scm_request",
        description="Call the tool gateway",
        parameters={
            "type": "object",
            "properties": {"method": {"type": "string"}, "path": {"type": "string"}},
            "required": ["method", "path"],
        },
    ))


class TestChat:
    """Test plain chat completions."""

    def test_chat_returns_first_choice_text(self, messages):
        """Test the first choice's content is returned."""
        recorder = Recorder(content=completion({"role": "assistant", "content": "Hi there"}))
        client = make_client(recorder)

        assert client.chat(messages) == "Hi there"

    def test_chat_request_shape(self, messages):
        """Test the request carries model and messages only."""
        recorder = Recorder(content=completion({"role": "assistant", "content": "ok"}))
        client = make_client(recorder)

        client.chat(messages)

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == ChatClient.CHAT_COMPLETIONS_URL
        assert request.headers["Authorization"] == f"Bearer {API_KEY}"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Accept"] == "application/json"
        assert recorder.body() == {
            "model": "gpt-4o-mini",
            "messages": [
                {"role": "system", "content": "You are helpful"},
                {"role": "user", "content": "Hello"},
            ],
        }

    def test_chat_null_content(self, messages):
        """Test a null content decodes as empty text."""
        client = make_client(Recorder(content=completion({"role": "assistant", "content": None})))

        assert client.chat(messages) == ""

    def test_non_2xx_carries_status_and_body(self, messages):
        """Test error statuses raise with the status and verbatim body."""
        body = '{"error": {"message": "Rate limit reached", "type": "requests"}}'
        client = make_client(Recorder(status_code=429, content=body.encode()))

        with pytest.raises(GatewayRequestError) as exc_info:
            client.chat(messages)

        error = exc_info.value
        assert error.status_code == 429
        assert error.body == body
        assert "status=429" in str(error)
        assert body in str(error)

    def test_empty_choices(self, messages):
        """Test a completion without choices is an empty-result error."""
        client = make_client(Recorder(content=b'{"id": "x", "choices": []}'))

        with pytest.raises(GatewayEmptyResponseError):
            client.chat(messages)

    def test_missing_choices(self, messages):
        """Test a completion without a choices key is an empty-result error."""
        client = make_client(Recorder(content=b"{}"))

        with pytest.raises(GatewayEmptyResponseError):
            client.chat(messages)

    def test_null_choices(self, messages):
        """Test a null choices list is an empty-result error."""
        client = make_client(Recorder(content=b'{"id": "x", "choices": null}'))

        with pytest.raises(GatewayEmptyResponseError):
            client.chat(messages)

    def test_null_message(self, messages):
        """Test a choice with a null message decodes as empty text."""
        client = make_client(Recorder(content=b'{"choices": [{"index": 0, "message": null}]}'))

        assert client.chat(messages) == ""

    def test_unused_fields_not_validated(self, messages):
        """Test odd values in fields the client does not read are ignored."""
        content = (
            b'{"id": 7, "model": null, "usage": "n/a",'
            b' "choices": [{"index": "first", "finish_reason": {"x": 1},'
            b' "message": {"role": "assistant", "content": "Hi"}}]}'
        )
        client = make_client(Recorder(content=content))

        assert client.chat(messages) == "Hi"

    @pytest.mark.parametrize("content", [b"not json", b'{"choices": "nope"}', b"[]"])
    def test_undecodable_body(self, messages, content):
        """Test bodies that are not a completion raise a decode error."""
        client = make_client(Recorder(content=content))

        with pytest.raises(GatewayDecodeError) as exc_info:
            client.chat(messages)

        assert exc_info.value.__cause__ is not None

    def test_connection_failure(self, messages):
        """Test transport failures surface as connection errors."""
        client = make_client(Recorder(error=httpx.ConnectTimeout("timed out")))

        with pytest.raises(GatewayConnectionError):
            client.chat(messages)


class TestChatWithTools:
    """Test tool-augmented completions."""

    def test_tool_calls_returned_unchanged(self, messages, lookup_tool):
        """Test tool call ids, types, names and arguments pass through."""
        arguments = '{"method":"GET","path":"/pop/stats","query":{"window":"7d"}}'
        recorder = Recorder(content=completion({
            "role": "assistant",
            "content": None,
            "tool_calls": [
                {"id": "call_abc", "type": "function", "function": {"name": "scm_request", "arguments": arguments}},
                {"id": "call_def", "type": "function", "function": {"name": "scm_request", "arguments": "{}"}},
            ],
        }))
        client = make_client(recorder)

        message = client.chat_with_tools(messages, [lookup_tool])

        assert message.role == "assistant"
        assert message.content == ""
        assert [(tc.id, tc.type, tc.function.name, tc.function.arguments) for tc in message.tool_calls] == [
            ("call_abc", "function", "scm_request", arguments),
            ("call_def", "function", "scm_request", "{}"),
        ]

    def test_tools_and_auto_choice_sent(self, messages, lookup_tool):
        """Test tool definitions and the auto choice are in the request."""
        recorder = Recorder(content=completion({"role": "assistant", "content": "done"}))
        client = make_client(recorder)

        client.chat_with_tools(messages, [lookup_tool])

        body = recorder.body()
        assert body["tool_choice"] == "auto"
        assert body["tools"] == [{
            "type": "function",
            "function": {
                "name": "scm_request",
                "description": "Call the tool gateway",
                "parameters": {
                    "type": "object",
                    "properties": {"method": {"type": "string"}, "path": {"type": "string"}},
                    "required": ["method", "path"],
                },
            },
        }]
        assert "stream" not in body

    def test_explicit_tool_choice_passed_through(self, messages, lookup_tool):
        """Test an object tool choice is sent as given."""
        recorder = Recorder(content=completion({"role": "assistant", "content": "done"}))
        client = make_client(recorder)
        choice = {"type": "function", "function": {"name": "scm_request"}}

        client.chat_with_tools_choice(messages, [lookup_tool], choice)

        assert recorder.body()["tool_choice"] == choice

    def test_tool_round_trip_conversation(self, messages, lookup_tool):
        """Test an assistant tool call and its reply serialize for the next turn."""
        first = Recorder(content=completion({
            "role": "assistant",
            "content": None,
            "tool_calls": [{"id": "call_1", "type": "function", "function": {"name": "scm_request", "arguments": "{}"}}],
        }))
        assistant = make_client(first).chat_with_tools(messages, [lookup_tool])

        conversation = messages + [
            assistant,
            Message(role="tool", tool_call_id="call_1", content='{"status": 200}'),
        ]
        second = Recorder(content=completion({"role": "assistant", "content": "All good"}))
        make_client(second).chat_with_tools(conversation, [lookup_tool])

        sent = second.body()["messages"]
        assert sent[2] == {
            "role": "assistant",
            "content": "",
            "tool_calls": [{"id": "call_1", "type": "function", "function": {"name": "scm_request", "arguments": "{}"}}],
        }
        assert sent[3] == {"role": "tool", "content": '{"status": 200}', "tool_call_id": "call_1"}

    def test_empty_choices(self, messages, lookup_tool):
        """Test a completion without choices is an empty-result error."""
        client = make_client(Recorder(content=b'{"choices": []}'))

        with pytest.raises(GatewayEmptyResponseError):
            client.chat_with_tools(messages, [lookup_tool])

    def test_messages_are_immutable(self):
        """Test messages cannot be modified after construction."""
        message = Message(role="user", content="Hello")

        with pytest.raises(ValidationError):
            message.content = "changed"


class TestChatStream:
    """Test streamed completions."""

    def test_tokens_delivered_in_order(self, messages):
        """Test the sink sees each token in order and the text is returned."""
        recorder = Recorder(content=CANNED_SSE)
        client = make_client(recorder)
        tokens = []

        text = client.chat_stream(messages, tokens.append)

        assert tokens == ["He", "llo"]
        assert text == "Hello"

    def test_stream_request_shape(self, messages):
        """Test streaming requests set stream and accept event streams."""
        recorder = Recorder(content=CANNED_SSE)
        client = make_client(recorder)

        client.chat_stream(messages)

        request = recorder.requests[0]
        assert request.headers["Accept"] == "text/event-stream"
        assert request.headers["Authorization"] == f"Bearer {API_KEY}"
        assert recorder.body()["stream"] is True

    def test_malformed_line_skipped(self, messages):
        """Test a malformed chunk between valid ones is skipped."""
        body = (
            b'data: {"choices":[{"delta":{"content":"Hel"}}]}\n\n'
            b'data: {"choices":[{"delta":{"content":\n\n'
            b'data: {"choices":[{"delta":{"content":"lo"}}]}\n\n'
            b"data: [DONE]\n\n"
        )
        client = make_client(Recorder(content=body))

        assert client.chat_stream(messages) == "Hello"

    def test_eof_without_done_is_success(self, messages):
        """Test a stream closing without the sentinel still succeeds."""
        body = b'data: {"choices":[{"delta":{"role":"assistant"}}]}\n\ndata: {"choices":[{"delta":{"content":"partial"}}]}\n\n'
        client = make_client(Recorder(content=body))

        assert client.chat_stream(messages) == "partial"

    def test_content_after_done_ignored(self, messages):
        """Test nothing after the sentinel is read."""
        body = CANNED_SSE + b'data: {"choices":[{"delta":{"content":"!"}}]}\n\n'
        tokens = []
        client = make_client(Recorder(content=body))

        assert client.chat_stream(messages, tokens.append) == "Hello"
        assert tokens == ["He", "llo"]

    def test_read_error_keeps_partial_text(self, messages):
        """Test a read failure raises with the text received so far."""
        stream = TrackingStream(
            [b'data: {"choices":[{"delta":{"content":"He"}}]}\n\n'],
            error=httpx.ReadError("connection reset"),
        )
        tokens = []
        client = make_client(Recorder(stream=stream))

        with pytest.raises(GatewayStreamError) as exc_info:
            client.chat_stream(messages, tokens.append)

        assert exc_info.value.partial_text == "He"
        assert isinstance(exc_info.value, GatewayConnectionError)
        assert tokens == ["He"]
        assert stream.closed

    def test_non_2xx_reads_error_body(self, messages):
        """Test error statuses raise with the body and close the response."""
        stream = TrackingStream([b"upstream ", b"unavailable\n"])
        client = make_client(Recorder(status_code=502, stream=stream))

        with pytest.raises(GatewayRequestError) as exc_info:
            client.chat_stream(messages)

        assert exc_info.value.status_code == 502
        assert "status=502 body=upstream unavailable" in str(exc_info.value)
        assert stream.closed

    def test_sink_error_propagates_and_closes(self, messages):
        """Test an exception from the sink propagates and the body is closed."""
        stream = TrackingStream([CANNED_SSE])
        client = make_client(Recorder(stream=stream))

        def sink(token):
            raise RuntimeError("sink failed")

        with pytest.raises(RuntimeError, match="sink failed"):
            client.chat_stream(messages, sink)
        assert stream.closed

    def test_connection_failure(self, messages):
        """Test a failure to connect is a connection error, not a stream error."""
        client = make_client(Recorder(error=httpx.ConnectError("refused")))

        with pytest.raises(GatewayConnectionError) as exc_info:
            client.chat_stream(messages)

        assert not isinstance(exc_info.value, GatewayStreamError)


class TestChatClientProperties:
    """Test client metadata."""

    def test_capabilities(self):
        """Test the chat client advertises streaming and tool use."""
        client = make_client(Recorder())
        assert client.supports(ClientCapability.STREAMING)
        assert client.supports(ClientCapability.TOOL_USE)
        assert not client.supports(ClientCapability.MULTIPART_UPLOADS)
        assert client.model == "gpt-4o-mini"
