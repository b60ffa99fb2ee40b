from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


class WireModel(BaseModel):
    """Base for payloads; field aliases are the XML element names."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class Listener(WireModel):
    protocol: str = Field(..., description="Front-end protocol, upper-cased")
    load_balancer_port: int
    instance_protocol: str = Field(..., description="Back-end protocol, upper-cased")
    instance_port: int


class ListenerDescription(WireModel):
    listener: Listener
    policy_names: list[str] = Field(default_factory=list)


class HealthCheck(WireModel):
    target: str = Field("TCP:80", description="protocol:port[/path]")
    interval: int = 30
    timeout: int = 5
    unhealthy_threshold: int = 2
    healthy_threshold: int = 10


class SourceSecurityGroup(WireModel):
    owner_alias: str = "amazon-elb"
    group_name: str = "amazon-elb-sg"


class LoadBalancerDescription(WireModel):
    load_balancer_name: str
    dns_name: str = Field("", alias="DNSName")
    availability_zones: list[str] = Field(default_factory=list)
    subnets: list[str] = Field(default_factory=list)
    listener_descriptions: list[ListenerDescription] = Field(default_factory=list)
    health_check: HealthCheck = Field(default_factory=HealthCheck)
    source_security_group: SourceSecurityGroup | None = None
    scheme: str | None = None


class InstanceRef(WireModel):
    instance_id: str


class InstanceState(WireModel):
    instance_id: str
    state: str = "OutOfService"
    reason_code: str = "Instance"
    description: str = "Instance is in pending state."


# Action results. Actions acknowledged with only a request id have none.


class CreateLoadBalancerResult(WireModel):
    dns_name: str = Field(..., alias="DNSName")


class RegisterInstancesWithLoadBalancerResult(WireModel):
    instances: list[InstanceRef] = Field(default_factory=list)


class DescribeLoadBalancersResult(WireModel):
    load_balancer_descriptions: list[LoadBalancerDescription] = Field(default_factory=list)


class DescribeInstanceHealthResult(WireModel):
    instance_states: list[InstanceState] = Field(default_factory=list)


class ConfigureHealthCheckResult(WireModel):
    health_check: HealthCheck


class ErrorDetail(WireModel):
    type: str = "Sender"
    code: str
    message: str


class ErrorResponse(WireModel):
    error: ErrorDetail
    request_id: str = ""
