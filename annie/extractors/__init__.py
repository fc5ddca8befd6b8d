"""Site extractors, each providing ``extract`` that returns Data records, and shared helpers."""