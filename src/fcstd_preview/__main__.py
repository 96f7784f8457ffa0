from fcstd_preview.cli import main

main()
