#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar 12 09:41:07 2024
"""
import os
import warnings

import numpy as np
from scipy.sparse import issparse
import scipy.linalg
import scipy.sparse.linalg

import logging.config

log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)

SHAPE_HEADER = "shape:"


def save_array(_array, _file_name):
    """Utility method, which allows to save numpy arrays of any dimension in text files. The array is flattened to
    a 2D table (first axis kept, remaining axes merged) and its full shape is declared in the header line, so that
    :func:`load_array` can restore it and check it against the expected dimensions. Values are written at full
    precision, so that a save/load round trip is exact. '.npy' files are saved in binary format instead.

    :param _array: array to be saved
    :type _array: numpy.ndarray
    :param _file_name: path to the file where the array has to be saved, provided that the path is a valid path
    :type _file_name: str
    :raises ValueError: if the array cannot be written at the given path
    """

    _array = np.asarray(_array, dtype=float)

    try:
        if os.path.splitext(_file_name)[1] == '.npy':
            np.save(_file_name, _array)
        else:
            if os.path.splitext(_file_name)[1] not in {'.txt', ''}:
                logger.warning(f"Non-default file extension for the file {_file_name}. "
                               f"Saving it as a text file.")
            header = SHAPE_HEADER + " " + " ".join(str(dim) for dim in _array.shape)
            table = _array.reshape((_array.shape[0], int(np.prod(_array.shape[1:])))) if _array.ndim > 1 \
                else np.atleast_1d(_array)
            if table.size == 0:
                with open(_file_name, 'w') as fp:
                    fp.write(f"# {header}\n")
            else:
                np.savetxt(_file_name, table, fmt='%.18e', header=header)
    except (OSError, IOError, FileNotFoundError, TypeError) as e:
        logger.critical(e)
        raise ValueError(f"Impossible to save the array at {_file_name}.")

    return


def read_shape_header(_file_name):
    """Utility method, which reads the shape declared in the header line of a text file written by
    :func:`save_array`

    :param _file_name: path to the text file
    :type _file_name: str
    :return: declared shape of the stored array
    :rtype: tuple(int)
    :raises ValueError: if the header is missing or malformed
    """

    with open(_file_name, 'r') as fp:
        first_line = fp.readline().strip()

    if not first_line.startswith('#') or SHAPE_HEADER not in first_line:
        raise ValueError(f"Missing shape header in {_file_name}")

    dims = first_line.split(SHAPE_HEADER, 1)[1].split()
    try:
        return tuple(int(dim) for dim in dims)
    except ValueError:
        raise ValueError(f"Malformed shape header '{first_line}' in {_file_name}")


def load_array(_file_name, expected_shape=None):
    """Utility method, which loads an array saved via :func:`save_array`. The shape declared in the header is used to
    restore the original dimensions; if 'expected_shape' is given, the declared shape must match it.

    :param _file_name: path to the file storing the array
    :type _file_name: str
    :param expected_shape: shape the loaded array must have. If None, no check is performed. Defaults to None
    :type expected_shape: tuple(int) or NoneType
    :return: the loaded array
    :rtype: numpy.ndarray
    :raises ValueError: if the declared shape is inconsistent with the data or with 'expected_shape'
    """

    if os.path.splitext(_file_name)[1] == '.npy':
        array = np.load(_file_name)
        shape = array.shape
    else:
        shape = read_shape_header(_file_name)
        if int(np.prod(shape)) == 0:
            array = np.zeros(shape)
        else:
            array = np.loadtxt(_file_name, ndmin=1)
            if array.size != int(np.prod(shape)):
                raise ValueError(f"File {_file_name} declares shape {shape} but stores {array.size} values")
            array = array.reshape(shape)

    if expected_shape is not None and tuple(shape) != tuple(expected_shape):
        raise ValueError(f"File {_file_name} declares shape {tuple(shape)}, "
                         f"while shape {tuple(expected_shape)} is expected")

    return array


def grow_array(_array, _shape):
    """Utility method, which returns a copy of '_array' enlarged to '_shape'. Entries of the original array are kept
    in the leading block, new entries are set to 0. The input array is never modified, so that references to it stay
    valid.

    :param _array: array to be enlarged
    :type _array: numpy.ndarray
    :param _shape: new shape; each dimension must be at least as large as the current one
    :type _shape: tuple(int)
    :return: the enlarged array
    :rtype: numpy.ndarray
    """

    assert len(_shape) == _array.ndim, "The number of dimensions cannot change while growing an array"
    assert all(new >= old for new, old in zip(_shape, _array.shape)), "Arrays can only grow"

    grown = np.zeros(_shape)
    grown[tuple(slice(0, dim) for dim in _array.shape)] = _array

    return grown


def triangular_index(_q1, _q2, _Q):
    """Index of the pair (_q1, _q2), with _q1 <= _q2, in the row-major packing of the upper triangle of a symmetric
    _Q x _Q table

    :param _q1: row index
    :type _q1: int
    :param _q2: column index, not smaller than the row index
    :type _q2: int
    :param _Q: size of the table
    :type _Q: int
    :return: packed index
    :rtype: int
    """
    assert 0 <= _q1 <= _q2 < _Q
    return _q1 * _Q - (_q1 * (_q1 - 1)) // 2 + (_q2 - _q1)


def n_triangular(_Q):
    """Number of entries in the packed upper triangle of a symmetric _Q x _Q table
    """
    return (_Q * (_Q + 1)) // 2


def mydot(vec1, vec2, norm_matrix=None):
    """It computes the inner product between 'vec1' and 'vec2', defined by the (positive definite) matrix 'norm_matrix'.
    If 'norm_matrix' is None (default), the standard inner product between 'vec1' and 'vec2' is returned.

    :param vec1: first vector
    :type vec1: np.ndarray
    :param vec2: second vector
    :type vec2: np.ndarray
    :param norm_matrix: positive definite matrix, defining the inner product. If None, it defaults to the identity.
    :type norm_matrix: scipy.sparse.csc_matrix or np.ndarray or NoneType
    :return: inner product between 'vec1' and 'vec2', defined by 'norm_matrix'
    :rtype: float
    """

    if norm_matrix is not None:
        return float(np.dot(vec1, matrix_vector_mul(norm_matrix, vec2)))
    else:
        return float(np.dot(vec1, vec2))


def mynorm(vec, norm_matrix=None):
    """It computes the norm of 'vec', defined by the (positive definite) matrix 'norm_matrix'.
    If 'norm_matrix' is None (default), the Euclidean norm of 'vec' is returned.

    :param vec: vector
    :type vec: np.ndarray
    :param norm_matrix: positive definite matrix, defining the norm. If None, it defaults to the identity.
    :type norm_matrix: scipy.sparse.csc_matrix or np.ndarray or NoneType
    :return: norm of 'vec', defined by 'norm_matrix'
    :rtype: double
    """
    return np.sqrt(mydot(vec, vec, norm_matrix))


def matrix_vector_mul(mat, vec):
    """ Computes the matrix-vector multiplication between mat and vec, where mat is either a full numpy matrix or a
    scipy.sparse matrix and vec is full.

    :param mat: pre-multiplicative matrix
    :type mat: numpy.ndarray or scipy.sparse
    :param vec: post-multiplicative vector, supposed to be full
    :type vec: numpy.ndarray
    :return: result of the matrix-vector multiplication mat*vec, given as a full vector
    :rtype: numpy.ndarray
    """

    if issparse(mat):
        Av = mat.dot(vec)
    elif type(mat) is np.ndarray:
        Av = mat.dot(vec)
    else:
        logger.error(f"Error: impossible to perform matrix-vector multiplication with type {type(mat)}")
        raise TypeError

    return np.asarray(Av).ravel()


def solve_inner_product_system(mat, vec):
    """Solves the linear system associated to the (symmetric positive definite) inner product matrix 'mat', using a
    sparse direct solver if 'mat' is a scipy.sparse matrix and a dense Cholesky-based solver otherwise

    :param mat: inner product matrix
    :type mat: numpy.ndarray or scipy.sparse
    :param vec: right-hand side
    :type vec: numpy.ndarray
    :return: solution of the linear system
    :rtype: numpy.ndarray
    """

    if issparse(mat):
        sol = scipy.sparse.linalg.spsolve(mat.tocsc(), vec)
    else:
        sol = scipy.linalg.solve(mat, vec, assume_a='pos')

    return np.asarray(sol).ravel()


def solve_dense_system(mat, vec):
    """Solves the dense linear system mat * x = vec. Ill-conditioned systems, flagged by scipy through a
    LinAlgWarning, are treated as failures, the same way singular systems are.

    :param mat: left-hand side matrix
    :type mat: numpy.ndarray
    :param vec: right-hand side vector
    :type vec: numpy.ndarray
    :return: solution of the linear system
    :rtype: numpy.ndarray
    :raises numpy.linalg.LinAlgError: if the matrix is singular or ill-conditioned
    """

    with warnings.catch_warnings():
        warnings.filterwarnings('error', category=scipy.linalg.LinAlgWarning)
        try:
            sol = scipy.linalg.solve(mat, vec)
        except scipy.linalg.LinAlgWarning as e:
            raise np.linalg.LinAlgError(f"Ill-conditioned linear system: {e}")

    if not np.all(np.isfinite(sol)):
        raise np.linalg.LinAlgError("The linear system solution contains non-finite values")

    return sol


__all__ = [
    "save_array",
    "read_shape_header",
    "load_array",
    "grow_array",
    "triangular_index",
    "n_triangular",
    "mydot",
    "mynorm",
    "matrix_vector_mul",
    "solve_inner_product_system",
    "solve_dense_system"
]
