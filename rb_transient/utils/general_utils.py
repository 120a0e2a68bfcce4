#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Created on Tue Mar 12 09:44:52 2024
"""

import os


def create_dir(name):
    """Create a directory at the given path

    :param name: path of the directory to be created, if not already existing
    :type name: str

    """
    if not os.path.exists(name):
        os.makedirs(name)
    return


def check_dir(name):
    """Check that a directory exists and is readable

    :param name: path of the directory
    :type name: str
    :return: True if the directory exists and can be read, False otherwise
    :rtype: bool
    """
    return os.path.isdir(name) and os.access(name, os.R_OK)
