# pyright: reportUnusedExpression=false
# ruff: noqa: B018

import approx_entropy.plugins
from approx_entropy import cli
from approx_entropy.hookspecs import approx_entropy_register_logarithms

cli.cli.context_class
cli.main

approx_entropy.plugins.hookimpl
approx_entropy_register_logarithms
