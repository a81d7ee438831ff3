"""
Point a scheduled CloudWatch Events rule at the ECS task published by a
CloudFormation stack.
"""
__version__ = "0.1.0"
