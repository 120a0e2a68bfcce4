#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The *rb_transient* module contains the implementation of the online evaluation of certified Reduced Basis (RB)
approximations of parametrized, linear time-invariant parabolic problems, discretized in time via the generalized
theta method. Given the affine decomposition of the problem operators and the inner products of the Riesz
representors of their affine components, computed once in the offline phase, it allows to compute, for a new
parameter value, the reduced trajectory, the outputs of interest and rigorous a posteriori error bounds on both, at a
cost which does not depend on the size of the high-fidelity problem. The offline quantities can be saved to files and
read back, so that the online evaluation can be deployed on its own. All these tasks are handled by different classes,
organized into the submodules that are linked hereafter.
"""
