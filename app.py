#!/usr/bin/env python3
import logging
import os

import aws_cdk as cdk

from webacl.models import Scope
from webacl.waf_stack import WafStack

logging.basicConfig(level=logging.INFO)

app = cdk.App()

waf_scope = Scope(app.node.try_get_context("wafScope") or Scope.CLOUDFRONT.value)

# CloudFront Web ACLs have to be deployed in us-east-1
if waf_scope == Scope.CLOUDFRONT:
    region = "us-east-1"
else:
    region = os.environ["CDK_DEFAULT_REGION"]

WafStack(app, "WafStack",
    env=cdk.Environment(
        account=os.environ["CDK_DEFAULT_ACCOUNT"],
        region=region),
    description=f"Opinionated {waf_scope.value} WAFv2 Web ACL")

app.synth()
