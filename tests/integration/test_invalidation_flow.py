"""
Integration tests for the full FULLBAN flow against stubbed AWS and nodes.
"""

import pytest
from fastapi.testclient import TestClient

from service_invalidator.app.dispatch import BroadcastDispatcher
from service_invalidator.app.fleet import FleetResolver, NodeAddressLookup
from service_invalidator.app.main import InvalidatorService
from shared.config import InvalidatorConfig
from shared.test_helpers import (
    RecordingTransport,
    TestDataFactory,
    TestInstance,
    create_stubbed_client,
    instance_filter,
)


ASG_NAME = "varnish-cache"


class TestInvalidationFlow:
    """Integration tests for resolve, lookup and dispatch together."""

    @pytest.fixture
    def aws(self):
        autoscaling, asg_stubber = create_stubbed_client("autoscaling")
        ec2, ec2_stubber = create_stubbed_client("ec2")
        with asg_stubber, ec2_stubber:
            yield {
                "autoscaling": autoscaling,
                "ec2": ec2,
                "asg_stubber": asg_stubber,
                "ec2_stubber": ec2_stubber,
            }
        asg_stubber.assert_no_pending_responses()
        ec2_stubber.assert_no_pending_responses()

    @pytest.fixture
    def nodes(self):
        return RecordingTransport()

    @pytest.fixture
    def client(self, aws, nodes):
        config = InvalidatorConfig(asg_name=ASG_NAME)
        lookup = NodeAddressLookup(config.region, client=aws["ec2"])
        service = InvalidatorService(
            config,
            fleet_resolver=FleetResolver(config.region, client=aws["autoscaling"]),
            address_lookup=lookup,
            dispatcher=BroadcastDispatcher(lookup, transport=nodes.transport)
        )
        return TestClient(service.app)

    def expect_fleet(self, aws, instances):
        aws["asg_stubber"].add_response(
            "describe_auto_scaling_groups",
            TestDataFactory.asg_response(ASG_NAME, instances),
            {"AutoScalingGroupNames": [ASG_NAME]}
        )

    def expect_lookup(self, aws, instance):
        aws["ec2_stubber"].add_response(
            "describe_instances",
            TestDataFactory.instances_response(instance),
            instance_filter(instance.instance_id)
        )

    def test_unhealthy_member_is_skipped(self, aws, nodes, client):
        """Test unhealthy member is skipped end to end."""
        instances = [
            TestInstance("i-1", "10.0.2.1", "Healthy"),
            TestInstance("i-2", "10.0.2.2", "Unhealthy"),
            TestInstance("i-3", "10.0.2.3", "HEALTHY"),
        ]
        self.expect_fleet(aws, instances)
        self.expect_lookup(aws, instances[0])
        self.expect_lookup(aws, instances[2])

        response = client.request("FULLBAN", "/")

        assert response.status_code == 200
        assert response.json() == {"fleet": ASG_NAME, "invalidated": 2, "skipped": 1}
        assert nodes.hosts == ["10.0.2.1", "10.0.2.3"]
        assert all(request.url.port == 6081 for request in nodes.requests)

    def test_second_node_503_aborts_broadcast(self, aws, nodes, client):
        """Test 503 from the second node aborts the broadcast."""
        instances = TestDataFactory.create_test_instances()
        self.expect_fleet(aws, instances)
        self.expect_lookup(aws, instances[0])
        self.expect_lookup(aws, instances[1])
        nodes.statuses[instances[1].private_ip] = 503

        response = client.request("FULLBAN", "/")

        assert response.status_code == 500
        assert nodes.hosts == ["10.0.1.11", "10.0.1.12"]

    def test_unknown_fleet_reports_server_error(self, aws, nodes, client):
        """Test unknown fleet reports a server error."""
        aws["asg_stubber"].add_response(
            "describe_auto_scaling_groups",
            {"AutoScalingGroups": []},
            {"AutoScalingGroupNames": [ASG_NAME]}
        )

        response = client.request("FULLBAN", "/")

        assert response.status_code == 500
        assert response.json()["code"] == "RESOLUTION_ERROR"
        assert nodes.requests == []
