"""Development server with rebuild on change."""
