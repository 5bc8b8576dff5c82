"""
Access Review Kernel

A fixed-chain approval workflow for access request forms:
- Validator and Recommender stage decisions
- Final approval gated on both stages and a signed artifact
- Resubmission after stage-level or final rejection
- Summary projection of approved requests
"""

__version__ = "0.1.0"
