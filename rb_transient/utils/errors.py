#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar 12 10:02:18 2024

Exception classes raised by the online RB evaluation. Plain argument errors (invalid basis size, invalid time step,
...) are reported with the built-in ValueError / IndexError; the classes below are used whenever the caller needs
additional context to diagnose the failure.
"""

import numpy as np


class RBError(Exception):
    """Base class of the errors raised by the RB evaluation"""


class StaleCacheError(RBError, ValueError):
    """Raised when the cached online residual terms are used for a parameter value or a basis size different from
    the ones they have been computed for"""


class RBSolveError(RBError, np.linalg.LinAlgError):
    """Raised when the reduced linear system assembled at some time step cannot be solved

    :var self.N: basis size of the failed solve
    :var self.time_step: time step at which the failure occurred
    """

    def __init__(self, message, N=None, time_step=None):
        super().__init__(message)
        self.N = N
        self.time_step = time_step
        return


class OfflineDataError(RBError, IOError):
    """Raised when the offline data cannot be written or read

    :var self.artifact: name of the offending file, if any
    """

    def __init__(self, message, artifact=None):
        super().__init__(message)
        self.artifact = artifact
        return


__all__ = [
    "RBError",
    "StaleCacheError",
    "RBSolveError",
    "OfflineDataError"
]
