"""Course review submission → GitHub pull request pipeline."""
