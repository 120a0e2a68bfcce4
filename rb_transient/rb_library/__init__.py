#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The *RB_Library* submodule configures as the core submodule of the *rb_transient* module, since it contains the
implementation of the classes which evaluate the reduced problems. In particular, it contains:

    * **TemporalDiscretization**: the features of the generalized theta method, i.e. the time-step size, the value of
      theta, the current time step and the number of time steps.
    * **AffineDecomposition classes**: the numbers of affine components of the problem operators, for steady
      problems (*AffineDecomposition*) and for unsteady ones (*AffineDecompositionUnsteady*, adding the mass operator).
    * **RBEvaluation classes**: the online evaluation of the reduced problems. *RBEvaluation* handles steady coercive
      problems, storing the reduced affine components of the stiffness operator, of the right-hand side and of the
      outputs, the inner products of the Riesz representors needed to compute the dual norms of the residuals, and
      solving the reduced problem with its error bounds. *TransientRBEvaluation* inherits from it and handles linear
      time-invariant parabolic problems: it performs the time marching of the reduced problem and computes the error
      bounds at each time step. The way the time marching is carried out (fixed parameter, with cached residual terms,
      or time-dependent parameter) and the formula of the error bounds are delegated to the *TimeMarching* and
      *ErrorBoundFormula* classes. Both evaluation classes can save their offline quantities to files and read them back.
    * **TransientRBConstruction**: the offline collaborator, which fills the data structures of a
      *TransientRBEvaluation* from the high-fidelity affine components of the problem and from a sequence of basis
      functions.
"""
