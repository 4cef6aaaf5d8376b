"""
Staging stack - VPC, S3, SQS, ECS Fargate, and ALB for LizDMS.

This stack deploys the LizDMS API for staging with:
- VPC with public/private subnets and a single NAT gateway
- S3 buckets for documents and generated outputs (destroyed with the stack)
- SQS processing queue with a Dead Letter Queue
- ECS Fargate service running the API container from ECR
- Application Load Balancer with HTTPS and HTTP -> HTTPS redirect
"""

from aws_cdk import (
    CfnOutput,
    Fn,
    RemovalPolicy,
    Stack,
)
from aws_cdk import (
    aws_certificatemanager as acm,
)
from aws_cdk import (
    aws_ec2 as ec2,
)
from aws_cdk import (
    aws_ecr as ecr,
)
from aws_cdk import (
    aws_ecs as ecs,
)
from aws_cdk import (
    aws_elasticloadbalancingv2 as elbv2,
)
from aws_cdk import (
    aws_iam as iam,
)
from aws_cdk import (
    aws_logs as logs,
)
from aws_cdk import (
    aws_s3 as s3,
)
from aws_cdk import (
    aws_sqs as sqs,
)
from constructs import Construct

from .config import (
    DEFAULT_MAX_AZS,
    DEFAULT_PRIVATE_SUBNET_MASK,
    DEFAULT_PUBLIC_SUBNET_MASK,
    DEFAULT_VPC_CIDR,
)

# Messages are moved to the DLQ after this many failed receives
MAX_RECEIVE_COUNT = 3

# Pre-issued ACM certificate for the staging API domain (us-east-2)
DEFAULT_CERTIFICATE_ARN = (
    "arn:aws:acm:us-east-2:502826260777:certificate/38022fb5-d579-401b-8b62-90c47bb6c2af"
)

CONTAINER_PORT = 3000
HEALTH_CHECK_PATH = "/"

# TODO: scope to the staging buckets and processing queue ARNs instead of "*"
TASK_ROLE_ACTIONS = ["s3:GetObject", "s3:PutObject", "sqs:SendMessage"]


class StagingStack(Stack):
    """
    Creates the full staging environment for the LizDMS API.

    All network options are optional; omitted values fall back to a
    10.0.0.0/16 VPC across 2 AZs with /24 public and private subnets.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        vpc_cidr: str = DEFAULT_VPC_CIDR,
        public_subnet_mask: int = DEFAULT_PUBLIC_SUBNET_MASK,
        private_subnet_mask: int = DEFAULT_PRIVATE_SUBNET_MASK,
        max_azs: int = DEFAULT_MAX_AZS,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Resource naming from CDK context (allows customization without code changes)
        resource_prefix = self.node.try_get_context("resource_prefix") or "lizdms"
        ecr_repository_name = self.node.try_get_context("ecr_repository_name") or "lizdms-api"
        log_stream_prefix = self.node.try_get_context("log_stream_prefix") or "lizdms"
        certificate_arn = self.node.try_get_context("certificate_arn") or DEFAULT_CERTIFICATE_ARN

        name_prefix = f"{resource_prefix}-staging"

        # =================================================================
        # Network
        # =================================================================

        self.vpc = ec2.Vpc(
            self,
            "Vpc",
            ip_addresses=ec2.IpAddresses.cidr(vpc_cidr),
            max_azs=max_azs,
            nat_gateways=1,  # Cost optimization: single NAT shared by all AZs
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=public_subnet_mask,
                ),
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                    cidr_mask=private_subnet_mask,
                ),
            ],
        )

        # =================================================================
        # S3 Buckets
        # =================================================================

        self.docs_bucket = s3.Bucket(
            self,
            "DocsBucket",
            bucket_name=f"{name_prefix}-docs",
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
        )

        self.outputs_bucket = s3.Bucket(
            self,
            "OutputsBucket",
            bucket_name=f"{name_prefix}-outputs",
            removal_policy=RemovalPolicy.DESTROY,
            auto_delete_objects=True,
        )

        # =================================================================
        # SQS + DLQ
        # =================================================================

        self.dead_letter_queue = sqs.Queue(
            self,
            "ProcessingDLQ",
            queue_name=f"{name_prefix}-processing-dlq",
        )

        self.queue = sqs.Queue(
            self,
            "ProcessingQueue",
            queue_name=f"{name_prefix}-processing",
            dead_letter_queue=sqs.DeadLetterQueue(
                queue=self.dead_letter_queue,
                max_receive_count=MAX_RECEIVE_COUNT,
            ),
        )

        # =================================================================
        # ECS Cluster
        # =================================================================

        self.cluster = ecs.Cluster(
            self,
            "Cluster",
            vpc=self.vpc,
            cluster_name=f"{name_prefix}-cluster",
        )

        # =================================================================
        # Task Definition
        # =================================================================

        self.task_definition = ecs.FargateTaskDefinition(
            self,
            "TaskDef",
            cpu=256,
            memory_limit_mib=512,
        )

        self.task_definition.add_to_task_role_policy(
            iam.PolicyStatement(
                actions=TASK_ROLE_ACTIONS,
                resources=["*"],
            )
        )

        # ECR repository for the API image - PREREQUISITE: Repository must exist
        self.ecr_repository = ecr.Repository.from_repository_name(
            self,
            "ApiRepository",
            ecr_repository_name,
        )

        self.container = self.task_definition.add_container(
            "ApiContainer",
            image=ecs.ContainerImage.from_ecr_repository(self.ecr_repository),
            logging=ecs.LogDrivers.aws_logs(
                stream_prefix=log_stream_prefix,
                log_retention=logs.RetentionDays.ONE_WEEK,
            ),
            environment={
                "DOCS_BUCKET": self.docs_bucket.bucket_name,
                "OUTPUTS_BUCKET": self.outputs_bucket.bucket_name,
                "QUEUE_URL": self.queue.queue_url,
                "AWS_REGION": self.region,
            },
        )

        self.container.add_port_mappings(ecs.PortMapping(container_port=CONTAINER_PORT))

        # =================================================================
        # ECS Service
        # =================================================================

        self.service = ecs.FargateService(
            self,
            "Service",
            cluster=self.cluster,
            task_definition=self.task_definition,
            desired_count=1,
            assign_public_ip=False,
        )

        # =================================================================
        # Application Load Balancer
        # =================================================================

        self.alb = elbv2.ApplicationLoadBalancer(
            self,
            "ALB",
            vpc=self.vpc,
            internet_facing=True,
        )

        certificate = acm.Certificate.from_certificate_arn(
            self,
            "AlbCertificate",
            certificate_arn,
        )

        self.https_listener = self.alb.add_listener(
            "HttpsListener",
            port=443,
            certificates=[certificate],
            open=True,
        )

        self.https_listener.add_targets(
            "EcsTargets",
            port=80,
            targets=[self.service],
            health_check=elbv2.HealthCheck(
                path=HEALTH_CHECK_PATH,
                healthy_http_codes="200",
            ),
        )

        # HTTP -> HTTPS redirect
        self.http_listener = self.alb.add_listener(
            "HttpRedirect",
            port=80,
            open=True,
            default_action=elbv2.ListenerAction.redirect(
                protocol="HTTPS",
                port="443",
                permanent=True,
            ),
        )

        # =================================================================
        # Outputs
        # =================================================================

        CfnOutput(
            self,
            "AlbDnsName",
            value=self.alb.load_balancer_dns_name,
            description="Application Load Balancer DNS name",
        )

        CfnOutput(
            self,
            "VpcCidr",
            value=self.vpc.vpc_cidr_block,
            description="VPC CIDR block",
        )

        CfnOutput(
            self,
            "PublicSubnets",
            value=Fn.join(",", [s.subnet_id for s in self.vpc.public_subnets]),
            description="Comma-separated public subnet IDs",
        )

        CfnOutput(
            self,
            "PrivateSubnets",
            value=Fn.join(",", [s.subnet_id for s in self.vpc.private_subnets]),
            description="Comma-separated private subnet IDs",
        )
