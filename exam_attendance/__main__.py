import sys

from exam_attendance.cli import main

sys.exit(main())
