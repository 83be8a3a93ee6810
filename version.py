"""
nbstatsd - project version for setup.py

The version comes from `git describe` when building from a git checkout and
is written to the package version file so that sdists and installed copies
know it too; otherwise the version file is used as is.

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""

import importlib.util
import os
import subprocess

ROOT_DIR = os.path.dirname(os.path.realpath(__file__))


def read_version_file(path):
    spec = importlib.util.spec_from_file_location("nbstatsd_version", path)
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except FileNotFoundError:
        return None
    return module.__version__


def write_version_file(path, version):
    with open(path, "w") as fp:
        fp.write("__version__ = '{}'\n".format(version))


def git_version():
    try:
        git_out = subprocess.check_output(["git", "describe", "--tags", "--always"], cwd=ROOT_DIR,
                                          stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return None
    version = git_out.decode("utf-8").strip()
    if not version:
        return None
    # untagged checkouts only get a commit hash
    if "." not in version:
        version = "0.0.1-0-unknown-{}".format(version)
    return version


def get_project_version(version_file):
    path = os.path.join(ROOT_DIR, version_file)
    file_version = read_version_file(path)
    version = git_version()
    if version is None:
        if file_version is None:
            raise RuntimeError("version not available from git or from file {!r}".format(path))
        return file_version
    if version != file_version:
        write_version_file(path, version)
    return version


if __name__ == "__main__":
    import sys
    print(get_project_version(sys.argv[1]))
