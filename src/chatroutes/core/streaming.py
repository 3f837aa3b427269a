# src/chatroutes/core/streaming.py
"""
Server-sent events reader for streamed replies.

Поток - последовательность строк ``data: <json>``, завершается
``data: [DONE]`` или закрытием соединения. Байты приходят произвольными
кусками, поэтому строки собираются в буфере; хвост без перевода строки
ждёт следующего куска.

Стрим никогда не ретраится.
"""

import codecs
import inspect
import json
import logging
import time
from contextlib import aclosing, closing
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterator, List, Mapping, Optional, Union

import httpx
import requests

from .exceptions import ChatRoutesError, classify, classify_httpx_exception, classify_requests_exception
from .executor import RequestExecutor, _parse_body
from .async_executor import AsyncRequestExecutor
from .logging import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

EVENT_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
EVENT_STREAM = "text/event-stream"

Event = Dict[str, Any]
EventCallback = Callable[[Event], None]
AsyncEventCallback = Callable[[Event], Union[None, Awaitable[None]]]


class StreamState(str, Enum):
    INIT = "init"
    READING = "reading"
    DONE = "done"
    ERROR = "error"


class StreamDecoder:
    """
    Incremental decoder: bytes in, parsed events out.

    Malformed payloads are logged and skipped; they never end the stream.

    Example:
        >>> decoder = StreamDecoder()
        >>> decoder.start()
        >>> decoder.feed(b'data: {"type": "content", "con')
        []
        >>> decoder.feed(b'tent": "Hi"}\\n')
        [{'type': 'content', 'content': 'Hi'}]
    """

    def __init__(self, prefix: str = EVENT_PREFIX, sentinel: str = DONE_SENTINEL,
                 encoding: str = "utf-8"):
        self.prefix = prefix
        self.sentinel = sentinel
        # Инкрементальный декодер не рвёт многобайтные символы на границе кусков
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self.state = StreamState.INIT
        self.events_emitted = 0
        self.skipped = 0

    @property
    def done(self) -> bool:
        return self.state is StreamState.DONE

    def start(self) -> None:
        if self.state is not StreamState.INIT:
            raise RuntimeError(f"Cannot start decoder in state {self.state.value}")
        self.state = StreamState.READING

    def fail(self) -> None:
        self.state = StreamState.ERROR

    def feed(self, data: Union[bytes, str]) -> List[Event]:
        """Append a chunk, return the events completed by it."""
        if self.state is not StreamState.READING:
            return []

        self._buffer += self._decoder.decode(data) if isinstance(data, bytes) else data

        events = []
        while self.state is StreamState.READING:
            newline = self._buffer.find("\n")
            if newline < 0:
                break
            line = self._buffer[:newline]
            self._buffer = self._buffer[newline + 1:]

            event = self._process_line(line)
            if event is not None:
                events.append(event)
        return events

    def close(self) -> List[Event]:
        """
        Peer closed the stream: process the unterminated tail, if any,
        and move to DONE.
        """
        if self.state is not StreamState.READING:
            return []

        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""

        events = []
        for line in tail.split("\n"):
            event = self._process_line(line)
            if event is not None:
                events.append(event)
            if self.state is not StreamState.READING:
                break

        self.state = StreamState.DONE
        return events

    def _process_line(self, line: str) -> Optional[Event]:
        line = line.rstrip("\r")
        if not line.startswith(self.prefix):
            return None

        payload = line[len(self.prefix):]
        if payload.startswith(" "):
            payload = payload[1:]

        if payload.strip() == self.sentinel:
            self.state = StreamState.DONE
            return None

        try:
            event = json.loads(payload)
        except ValueError as e:
            self.skipped += 1
            logger.warning("Failed to parse stream chunk: %s (%s)", payload[:200], e)
            return None

        if not isinstance(event, dict):
            self.skipped += 1
            logger.warning("Failed to parse stream chunk: not a JSON object: %s", payload[:200])
            return None

        self.events_emitted += 1
        return event


class StreamReader:
    """
    Blocking stream reader on top of a RequestExecutor's session.

    Example:
        >>> reader = StreamReader(executor)
        >>> for event in reader.iter_stream(
        ...         "/api/v1/conversations/c1/messages/stream", {"content": "Hi"}):
        ...     print(event.get("content", ""), end="")
    """

    def __init__(self, executor: RequestExecutor, chunk_size: Optional[int] = None):
        """
        Args:
            executor: Source of session, URL, headers and timeout
            chunk_size: Read size for iter_content (None = as bytes arrive)
        """
        self._executor = executor
        self.chunk_size = chunk_size

    def iter_stream(
        self,
        path: str,
        body: Any,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Iterator[Event]:
        """
        POST ``body`` and yield events until the sentinel or end of stream.

        Raises:
            ChatRoutesError: Non-2xx status (before any event) or transport failure
        """
        executor = self._executor
        url = executor.build_url(path)
        request_headers = executor.build_headers(headers, accept=EVENT_STREAM)
        decoder = StreamDecoder()
        start_time = time.monotonic()

        _bind_correlation_id(executor, request_headers)
        try:
            try:
                response = executor.session.post(
                    url,
                    json=body,
                    headers=request_headers,
                    stream=True,
                    timeout=executor.config.timeout,
                )
            except requests.exceptions.RequestException as e:
                raise classify_requests_exception(e, url) from e

            with response:
                if not 200 <= response.status_code < 300:
                    raise classify(
                        response.status_code,
                        _error_body(_read_error_content(response)),
                        response.headers,
                    )

                decoder.start()
                _log_stream(executor, "Stream started", url=url)

                try:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        yield from decoder.feed(chunk)
                        if decoder.done:
                            break
                    else:
                        yield from decoder.close()
                except requests.exceptions.RequestException as e:
                    raise classify_requests_exception(e, url) from e

            _log_stream(executor, "Stream completed", url=url, events=decoder.events_emitted,
                        skipped=decoder.skipped, duration_ms=_elapsed_ms(start_time))
        except ChatRoutesError as error:
            decoder.fail()
            _log_stream_failed(executor, url, error, decoder, start_time)
            raise
        finally:
            _clear_correlation_id(executor)

    def open_stream(
        self,
        path: str,
        body: Any,
        on_event: EventCallback,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Push variant: call ``on_event`` for each event in arrival order.

        The response is released on every exit path, including an exception
        raised by ``on_event``.
        """
        with closing(self.iter_stream(path, body, headers=headers)) as events:
            for event in events:
                on_event(event)


class AsyncStreamReader:
    """Non-blocking stream reader on top of an AsyncRequestExecutor."""

    def __init__(self, executor: AsyncRequestExecutor):
        self._executor = executor

    async def iter_stream(
        self,
        path: str,
        body: Any,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> AsyncIterator[Event]:
        executor = self._executor
        url = executor.build_url(path)
        request_headers = executor.build_headers(headers, accept=EVENT_STREAM)
        decoder = StreamDecoder()
        start_time = time.monotonic()

        client = await executor.get_client()
        _bind_correlation_id(executor, request_headers)
        try:
            try:
                async with client.stream(
                    "POST",
                    url,
                    json=body,
                    headers=request_headers,
                    timeout=executor.config.timeout,
                ) as response:
                    if not 200 <= response.status_code < 300:
                        raise classify(
                            response.status_code,
                            _error_body(await _aread_error_content(response)),
                            response.headers,
                        )

                    decoder.start()
                    _log_stream(executor, "Stream started", url=url)

                    async for chunk in response.aiter_bytes():
                        for event in decoder.feed(chunk):
                            yield event
                        if decoder.done:
                            break
                    else:
                        for event in decoder.close():
                            yield event
            except httpx.TransportError as e:
                raise classify_httpx_exception(e, url) from e

            _log_stream(executor, "Stream completed", url=url, events=decoder.events_emitted,
                        skipped=decoder.skipped, duration_ms=_elapsed_ms(start_time))
        except ChatRoutesError as error:
            decoder.fail()
            _log_stream_failed(executor, url, error, decoder, start_time)
            raise
        finally:
            _clear_correlation_id(executor)

    async def open_stream(
        self,
        path: str,
        body: Any,
        on_event: AsyncEventCallback,
        *,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        """``on_event`` may be a plain function or a coroutine function."""
        async with aclosing(self.iter_stream(path, body, headers=headers)) as events:
            async for event in events:
                result = on_event(event)
                if inspect.isawaitable(result):
                    await result


def _error_body(content: Optional[bytes]) -> Optional[Dict[str, Any]]:
    if content is None:
        return None
    parsed = _parse_body(content)
    return parsed if isinstance(parsed, dict) else None


def _read_error_content(response: requests.Response) -> Optional[bytes]:
    # Статус уже известен; обрыв при чтении тела не превращает его в NETWORK
    try:
        return response.content
    except requests.exceptions.RequestException as e:
        logger.debug("Failed to read error body of stream response: %s", e)
        return None


async def _aread_error_content(response: httpx.Response) -> Optional[bytes]:
    try:
        return await response.aread()
    except httpx.TransportError as e:
        logger.debug("Failed to read error body of stream response: %s", e)
        return None


def _elapsed_ms(start_time: float) -> float:
    return round((time.monotonic() - start_time) * 1000, 2)


def _bind_correlation_id(executor, headers: Mapping[str, str]) -> None:
    if executor.logger:
        set_correlation_id(headers["X-Correlation-ID"])


def _clear_correlation_id(executor) -> None:
    if executor.logger:
        clear_correlation_id()


def _log_stream(executor, message: str, **fields: Any) -> None:
    if executor.logger:
        executor.logger.info(message, **fields)


def _log_stream_failed(executor, url: str, error: ChatRoutesError,
                       decoder: StreamDecoder, start_time: float) -> None:
    if executor.logger:
        executor.logger.error(
            "Stream failed",
            url=url,
            error=str(error),
            error_kind=error.kind.value,
            http_status=error.http_status,
            events=decoder.events_emitted,
            duration_ms=_elapsed_ms(start_time),
        )
