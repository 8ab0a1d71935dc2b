"""MaternaCare clinic management backend."""
