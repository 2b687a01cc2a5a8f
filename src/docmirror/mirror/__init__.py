"""Path resolution, link rewriting, storage, versions and search for docset mirrors."""
