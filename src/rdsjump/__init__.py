"""rdsjump: open a database client on an RDS instance through a bastion tunnel."""
