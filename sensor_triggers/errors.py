# SPDX-License-Identifier: Apache-2.0
"""Error types raised by the trigger pipeline."""
from __future__ import annotations


class TriggerError(Exception):
    """Base class for every failure surfaced by a trigger dispatch."""


class ParameterError(TriggerError):
    pass


class MissingEventError(ParameterError):
    def __init__(self, dependency: str):
        super().__init__(f"event for dependency '{dependency}' not found")
        self.dependency = dependency


class PathResolutionError(ParameterError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"path '{path}' does not resolve: {reason}")
        self.path = path


class InvalidOperationError(ParameterError):
    pass


class PayloadNotSpecifiedError(TriggerError):
    pass


class AuthenticationError(TriggerError):
    pass


class ExecutionError(TriggerError):
    pass


class InvalidResourceTypeError(TriggerError):
    pass
