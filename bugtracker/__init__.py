"""Bug tracker API: accounts, bearer-token auth, report attachments and timelines."""
