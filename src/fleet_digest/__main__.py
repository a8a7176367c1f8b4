from fleet_digest.cli import main

raise SystemExit(main())
