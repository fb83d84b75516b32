"""Example of an acceptance scenario for SSM Contacts contact channels.

Runs against AWS, so set credentials and a region first:

    AWS_REGION=us-west-2 python examples/acceptance_scenario_example.py
"""

import os

from tfaws.acctest import (
    Configuration,
    Ref,
    ResourceBlock,
    TestCase,
    TestStep,
    check_destroy,
    check_resource_attr,
    check_resource_attr_pair,
    compose_check,
    random_alias,
    run_test,
)
from tfaws.config.models import ProviderConfig
from tfaws.provider import Provider
from tfaws.utils.logging import setup_logging

CHANNEL = "aws_ssmcontacts_contact_channel.test"


def channel_config(alias: str, address: str) -> Configuration:
    """A contact and one email channel attached to it."""
    return Configuration(
        ResourceBlock("aws_ssmcontacts_contact", "test", {"alias": alias, "type": "PERSONAL"}),
        ResourceBlock("aws_ssmcontacts_contact_channel", "test", {
            "contact_id": Ref("aws_ssmcontacts_contact.test", "arn"),
            "delivery_address": {"simple_address": address},
            "name": alias,
            "type": "EMAIL",
        }),
    )


def main():
    setup_logging('info', log_dir=None)
    provider = Provider(ProviderConfig(region=os.environ.get('AWS_REGION', 'us-west-2')))
    alias = random_alias()

    print(channel_config(alias, f"{alias}@example.com").describe())

    run_test(provider, TestCase(
        check_destroy=check_destroy(provider, "aws_ssmcontacts_contact_channel"),
        steps=[
            TestStep(
                config=channel_config(alias, f"{alias}@example.com"),
                check=compose_check(
                    check_resource_attr(CHANNEL, "activation_status", "NOT_ACTIVATED"),
                    check_resource_attr(CHANNEL, "delivery_address.simple_address", f"{alias}@example.com"),
                    check_resource_attr_pair(CHANNEL, "contact_id", "aws_ssmcontacts_contact.test", "arn"),
                ),
            ),
            TestStep(resource_name=CHANNEL, import_state=True, import_state_verify=True),
            TestStep(
                config=channel_config(alias, f"{alias}-updated@example.com"),
                check=check_resource_attr(CHANNEL, "delivery_address.simple_address", f"{alias}-updated@example.com"),
            ),
        ],
    ))
    print("Scenario passed")


if __name__ == '__main__':
    main()
