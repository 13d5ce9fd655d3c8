"""Shared fixtures: a scripted resolver and packages.config helpers."""

import json
import os

import pytest

from nuget.resolver import Resolver, ResolverResult


def nu1202(pkg_id, version, tfm="net472"):
    """Render a dotnet restore NU1202 line for one package."""
    return (
        f"/tmp/work/TempLockProject.csproj : error NU1202: Package {pkg_id} {version} "
        f"is not compatible with {tfm} (.NETFramework,Version=v4.7.2). "
        f"Package {pkg_id} {version} supports: netstandard2.1 (.NETStandard,Version=v2.1)\n"
    )


def ok():
    return ResolverResult(exit_code=0, stdout="Restore succeeded.\n")


def failed(stdout="", stderr=""):
    return ResolverResult(exit_code=1, stdout=stdout, stderr=stderr)


class FakeResolver(Resolver):
    """Returns scripted results in order and writes a lock file on success.

    lock_location: "beside" writes packages.lock.json next to the project,
    "obj" writes it under obj/, None writes nothing.
    """

    def __init__(self, results, lock_location="beside"):
        self.results = list(results)
        self.lock_location = lock_location
        self.calls = []
        self.descriptors = []

    def invoke(self, descriptor_path, workdir):
        self.calls.append((descriptor_path, workdir))
        with open(descriptor_path, encoding="utf-8") as f:
            self.descriptors.append(f.read())
        index = min(len(self.calls), len(self.results)) - 1
        result = self.results[index]
        if result.succeeded and self.lock_location:
            target_dir = os.path.dirname(descriptor_path)
            if self.lock_location == "obj":
                target_dir = os.path.join(target_dir, "obj")
                os.makedirs(target_dir, exist_ok=True)
            with open(os.path.join(target_dir, "packages.lock.json"), "w", encoding="utf-8") as f:
                json.dump({"version": 1, "attempt": len(self.calls)}, f)
        return result


def write_packages_config(directory, packages, target_framework=None):
    """Write a packages.config listing (id, version) pairs and return its path."""
    os.makedirs(directory, exist_ok=True)
    lines = ['<?xml version="1.0" encoding="utf-8"?>', "<packages>"]
    for pkg_id, version in packages:
        tfm_attr = f' targetFramework="{target_framework}"' if target_framework else ""
        lines.append(f'  <package id="{pkg_id}" version="{version}"{tfm_attr} />')
    lines.append("</packages>")
    path = os.path.join(directory, "packages.config")
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
    return path


@pytest.fixture
def make_resolver():
    return FakeResolver


@pytest.fixture
def packages_config():
    return write_packages_config
