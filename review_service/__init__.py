"""Product review scraping service"""
