"""Allow ``python -m bankforge``."""

from bankforge.cli import main

raise SystemExit(main())
