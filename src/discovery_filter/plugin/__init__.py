"""Relay write-policy plugin: line protocol, admission policy, loop.

The relay spawns the plugin and pipes one JSON request per event to its
stdin; the plugin answers each with one JSON verdict on stdout.
"""
from discovery_filter.plugin.evaluator import AdmissionPolicy, Evaluator
from discovery_filter.plugin.loop import LoopStats, PluginLoop
from discovery_filter.plugin.protocol import (
    LineReader,
    PluginRequest,
    RequestDecodeError,
    decode_error_verdict,
    decode_request,
    encode_verdict,
)

__all__ = [
    "AdmissionPolicy",
    "Evaluator",
    "LoopStats",
    "PluginLoop",
    "LineReader",
    "PluginRequest",
    "RequestDecodeError",
    "decode_error_verdict",
    "decode_request",
    "encode_verdict",
]
