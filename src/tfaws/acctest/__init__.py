"""Acceptance scenarios: declarative configurations driven through resource handlers."""

from tfaws.acctest.checks import (
    CheckError,
    CheckFunc,
    ScenarioError,
    check_resource_attr,
    check_resource_attr_pair,
    check_resource_attr_set,
    check_resource_disappears,
    check_resource_exists,
    compose_check,
    match_resource_attr_regional_arn,
)
from tfaws.acctest.config import Configuration, Ref, ResourceBlock, compose
from tfaws.acctest.helpers import (
    ACC_ENV_VAR,
    acceptance_enabled,
    check_destroy,
    pre_check,
    random_alias,
    random_with_prefix,
)
from tfaws.acctest.runner import ScenarioRunner, TestCase, TestStep, run_test

__all__ = [
    "ACC_ENV_VAR",
    "CheckError",
    "CheckFunc",
    "Configuration",
    "Ref",
    "ResourceBlock",
    "ScenarioError",
    "ScenarioRunner",
    "TestCase",
    "TestStep",
    "acceptance_enabled",
    "check_destroy",
    "check_resource_attr",
    "check_resource_attr_pair",
    "check_resource_attr_set",
    "check_resource_disappears",
    "check_resource_exists",
    "compose",
    "compose_check",
    "match_resource_attr_regional_arn",
    "pre_check",
    "random_alias",
    "random_with_prefix",
    "run_test",
]
