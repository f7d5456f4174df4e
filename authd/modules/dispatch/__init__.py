"""
Dispatch Module - Black Box Interface

Purpose: Receive auth requests from the message queue and publish replies
Interface: listen(), process_message(), handle()
Hidden: Channel layout, message format, task scheduling

Replaceable with any transport (HTTP, gRPC, another broker) calling the coordinator.
"""

from .dispatcher import RequestDispatcher
from .models import AuthReply, AuthRequest, RequestType, is_valid_request_type

__all__ = ["AuthReply", "AuthRequest", "RequestDispatcher", "RequestType", "is_valid_request_type"]
