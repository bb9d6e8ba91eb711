"""SQLAlchemy models, repositories, the policy enforcer and the repository factory."""