from mdblog.cli import main

raise SystemExit(main())
