"""Example usage of the client registry, tag synchronization and error handling."""

from botocore.exceptions import ClientError

from tfaws.config.models import ProviderConfig
from tfaws.provider import Provider
from tfaws.tags import KeyValueTags, plan_tag_changes
from tfaws.utils.errors import ErrorContext, error_handler


def example_plan_tags():
    """Example: Planning tag changes without calling AWS."""
    print("=== Tag Change Planning ===")

    old = {"team": "payments", "env": "dev", "aws:cloudformation:stack-name": "core"}
    new = {"team": "payments", "env": "prod", "owner": "ops"}

    changes = plan_tag_changes(old, new, "kafka")
    print(f"  Remove: {changes.removed.keys()}")
    print(f"  Set:    {changes.updated.to_dict()}")


def example_kafka_tags():
    """Example: Replacing the tags of an MSK cluster."""
    print("\n=== Kafka Tag Sync ===")

    provider = Provider(ProviderConfig(region='us-east-1'))
    kafka = provider.service_package('kafka')
    cluster_arn = 'arn:aws:kafka:us-east-1:123456789012:cluster/demo/abcd1234'

    try:
        current = kafka.list_tags(provider.clients, cluster_arn)
        print(f"✓ Current tags: {current.to_dict()}")

        changes = kafka.update_tags(provider.clients, cluster_arn, current, {'env': 'prod'})
        print(f"✓ Removed {len(changes.removed)} and set {len(changes.updated)} tags")
    except Exception as e:
        print(error_handler.handle_exception(e).to_user_message())


def example_error_handling():
    """Example: Error classification."""
    print("\n=== Error Handling ===")

    error = ClientError(
        {
            'Error': {'Code': 'AccessDeniedException', 'Message': 'not authorized to perform ssm-contacts:TagResource'},
            'ResponseMetadata': {'RequestId': 'abc-123'}
        },
        'TagResource'
    )
    context = ErrorContext(
        resource_id='arn:aws:ssm-contacts:us-east-1:123456789012:contact/oncall',
        resource_type='aws_ssmcontacts_contact',
        operation='update',
        aws_service='ssmcontacts',
        aws_operation='TagResource'
    )
    print(error_handler.handle_exception(error, context).to_user_message())

    merged = KeyValueTags.new({'a': '1'}).merge(KeyValueTags.new({'b': '2'}))
    print(f"\n  Merged tags: {merged.to_dict()}")


def main():
    """Run all examples."""
    print("Client Registry and Tagging Examples")
    print("=" * 60)

    # These examples work without AWS credentials
    example_plan_tags()
    example_error_handling()

    # Needs valid AWS credentials and an existing cluster
    # example_kafka_tags()

    print("\n" + "=" * 60)
    print("Examples completed!")


if __name__ == '__main__':
    main()
