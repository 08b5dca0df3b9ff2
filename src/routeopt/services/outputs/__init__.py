"""Optimization result serializers."""

from .routing_formatter import optimization_result_to_response

__all__ = ["optimization_result_to_response"]
