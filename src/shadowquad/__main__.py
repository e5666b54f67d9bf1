from __future__ import annotations

from shadowquad.cli import main

raise SystemExit(main())
