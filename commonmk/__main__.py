from commonmk.cli.commonmkctl import main


if __name__ == "__main__":
    main()
