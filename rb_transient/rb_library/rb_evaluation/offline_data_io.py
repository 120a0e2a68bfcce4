#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Mon Mar 18 15:10:26 2024

Storage of the offline quantities of the RB evaluations. A directory holds:

    * a manifest 'offline_data.json', with the format name and version, the basis size, the numbers of affine
      components and the problem-specific scalar data (e.g. the temporal discretization);
    * one text file per array, written via :func:`~array_utils.save_array`, whose header declares the array shape.

Arrays are read into a staging dictionary and checked against the shapes expected from the manifest before being
returned, so that a failed read leaves the caller's state untouched.
"""

import json
import os

import numpy as np

import rb_transient.utils.array_utils as arr_utils
import rb_transient.utils.general_utils as gen_utils
import rb_transient.utils.errors as err

import logging.config
log_file_path = os.path.join(os.path.dirname(os.path.abspath(__file__)),
                             os.path.normpath('../../log.cfg'))
logging.config.fileConfig(log_file_path, disable_existing_loggers=False)
logger = logging.getLogger(__name__)

FORMAT_NAME = "rb_transient_offline_data"
FORMAT_VERSION = 1
MANIFEST_FILE = "offline_data.json"
ARTIFACT_EXTENSION = ".txt"


def artifact_path(_directory, _name):
    return os.path.join(_directory, _name + ARTIFACT_EXTENSION)


def write_offline_data(_directory, _manifest, _artifacts):
    """Writes the manifest and the arrays in the given directory, creating it if needed

    :param _directory: path to the directory
    :type _directory: str
    :param _manifest: scalar data to be stored in the manifest; format name and version are added
    :type _manifest: dict
    :param _artifacts: arrays to be stored, indexed by name
    :type _artifacts: dict
    :raises OfflineDataError: if some file cannot be written
    """

    try:
        gen_utils.create_dir(_directory)
    except OSError as e:
        logger.critical(f"Impossible to create the directory {_directory}: {e}")
        raise err.OfflineDataError(f"Impossible to create the directory {_directory}", artifact=_directory)

    # a stale manifest is removed first and the new one is written last, so that a directory with a manifest is
    # always complete
    manifest_path = os.path.join(_directory, MANIFEST_FILE)
    try:
        if os.path.isfile(manifest_path):
            os.remove(manifest_path)
    except OSError as e:
        logger.critical(f"Impossible to remove the previous manifest in {_directory}: {e}")
        raise err.OfflineDataError(f"Impossible to overwrite the offline data in {_directory}",
                                   artifact=MANIFEST_FILE)

    for name, array in _artifacts.items():
        try:
            arr_utils.save_array(array, artifact_path(_directory, name))
        except (OSError, ValueError) as e:
            logger.critical(f"Impossible to write the offline data file {name + ARTIFACT_EXTENSION}: {e}")
            raise err.OfflineDataError(str(e), artifact=name + ARTIFACT_EXTENSION)

    manifest = {'format': FORMAT_NAME, 'version': FORMAT_VERSION}
    manifest.update(_manifest)
    manifest['artifacts'] = sorted(_artifacts.keys())

    try:
        with open(manifest_path, 'w') as fp:
            json.dump(manifest, fp, indent=4)
    except (OSError, TypeError) as e:
        logger.critical(e)
        raise err.OfflineDataError(f"Impossible to write the manifest in {_directory}", artifact=MANIFEST_FILE)

    logger.info(f"Offline data with {len(_artifacts)} arrays saved in {_directory}")
    return


def read_manifest(_directory):
    """Reads and checks the manifest stored in the given directory

    :param _directory: path to the directory
    :type _directory: str
    :return: content of the manifest
    :rtype: dict
    :raises OfflineDataError: if the directory or the manifest are missing or unreadable, or if the manifest refers
        to a different format or version
    """

    if not gen_utils.check_dir(_directory):
        logger.critical(f"The offline data directory {_directory} does not exist or is not readable")
        raise err.OfflineDataError(f"Missing or unreadable offline data directory {_directory}", artifact=_directory)

    try:
        with open(os.path.join(_directory, MANIFEST_FILE), 'r') as fp:
            manifest = json.load(fp)
    except (OSError, ValueError) as e:
        logger.critical(f"Impossible to read the manifest in {_directory}: {e}")
        raise err.OfflineDataError(f"Missing or corrupt manifest in {_directory}", artifact=MANIFEST_FILE)

    if not isinstance(manifest, dict) or manifest.get('format') != FORMAT_NAME:
        raise err.OfflineDataError(f"The manifest in {_directory} does not describe RB offline data",
                                   artifact=MANIFEST_FILE)
    if manifest.get('version') != FORMAT_VERSION:
        raise err.OfflineDataError(f"Unsupported offline data version {manifest.get('version')}; "
                                   f"version {FORMAT_VERSION} is expected", artifact=MANIFEST_FILE)

    return manifest


def _convert_entry(_value, _type):
    if _type is int and (isinstance(_value, bool) or int(_value) != _value):
        raise ValueError(f"{_value} is not an integer")
    return _type(_value)


def manifest_entry(_manifest, _key, _type=int, _item_type=int):
    """Returns the manifest entry _key converted to _type; if _type is list, each item is converted to _item_type.
    Integer entries must hold integral values, e.g. 2.5 is rejected rather than truncated

    :raises OfflineDataError: if the entry is missing or cannot be converted
    """

    try:
        value = _manifest[_key]
        if _type is list:
            return [_convert_entry(v, _item_type) for v in value]
        return _convert_entry(value, _type)
    except (KeyError, TypeError, ValueError, OverflowError):
        raise err.OfflineDataError(f"Missing or invalid entry '{_key}' in the manifest", artifact=MANIFEST_FILE)


def read_offline_arrays(_directory, _expected_shapes):
    """Reads the arrays with the given names from the directory, checking their shapes

    :param _directory: path to the directory
    :type _directory: str
    :param _expected_shapes: expected shape of each array, indexed by name
    :type _expected_shapes: dict
    :return: the arrays, indexed by name
    :rtype: dict
    :raises OfflineDataError: if a file is missing, corrupt or declares a shape different from the expected one
    """

    staged = dict()
    for name, shape in _expected_shapes.items():
        file_name = artifact_path(_directory, name)
        if not os.path.isfile(file_name):
            logger.critical(f"Missing offline data file {file_name}")
            raise err.OfflineDataError(f"Missing offline data file {file_name}", artifact=name + ARTIFACT_EXTENSION)
        try:
            staged[name] = arr_utils.load_array(file_name, expected_shape=shape)
        except (OSError, ValueError) as e:
            logger.critical(f"Invalid offline data file {file_name}: {e}")
            raise err.OfflineDataError(f"Invalid offline data file {file_name}: {e}",
                                       artifact=name + ARTIFACT_EXTENSION)

        if not np.all(np.isfinite(staged[name])):
            raise err.OfflineDataError(f"Offline data file {file_name} contains non-finite values",
                                       artifact=name + ARTIFACT_EXTENSION)

    logger.debug(f"Read {len(staged)} offline arrays from {_directory}")
    return staged


__all__ = [
    "FORMAT_NAME",
    "FORMAT_VERSION",
    "MANIFEST_FILE",
    "artifact_path",
    "write_offline_data",
    "read_manifest",
    "manifest_entry",
    "read_offline_arrays"
]
