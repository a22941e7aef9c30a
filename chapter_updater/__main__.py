from chapter_updater.cli import main

raise SystemExit(main())
