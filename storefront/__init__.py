# GlamorousDesi storefront service
