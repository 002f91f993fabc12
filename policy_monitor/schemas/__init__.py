from policy_monitor.schemas.policy import PolicyAnalysis, PolicyRecord

__all__ = ["PolicyAnalysis", "PolicyRecord"]
