#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The *PDE_Problem* submodule contains the implementation of the classes describing the parametric dependence of the
problem at hand. The *ParameterHandler* class is responsible for the handling of the characteristic parameters of the
problem, storing their admissible range and their current value, and implementing methods to rescale the parameter
values and to generate new random parameter values within the range. The *AffineProblem* classes, instead, store the
parameter-dependent scalar functions ("theta functions") which multiply the affine components of the problem operators,
together with a lower bound of the coercivity constant of the problem. The generic classes keep default theta functions
that raise an Exception if evaluated; specific problems either inherit from them and implement the
*define_theta_functions()* method, or set the functions via the *set_theta_functions()* method. Two classes are
available: *AffineProblem*, featuring the theta functions of the stiffness operator, of the right-hand side and of the
outputs, and *AffineProblemUnsteady*, inheriting from the first one and adding the theta functions of the mass operator.
"""
